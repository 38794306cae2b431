from __future__ import annotations

import math

from meetscribe.contracts import Segment, TranscriptLine


def global_seconds(chunk_index: int, offset_cs: int, chunk_seconds: float) -> float:
    return chunk_index * chunk_seconds + offset_cs / 100.0


def merge_segment(chunk_index: int, segment: Segment, chunk_seconds: float) -> TranscriptLine:
    """
    Place a chunk-relative segment on the session timeline.

    Assumes every earlier chunk covered exactly `chunk_seconds`; a skipped tick
    therefore makes later lines lag real time.
    """
    return TranscriptLine(
        start=global_seconds(chunk_index, segment.start_cs, chunk_seconds),
        end=global_seconds(chunk_index, segment.end_cs, chunk_seconds),
        text=segment.text.strip(),
    )


def format_mmss(seconds: float) -> str:
    total = max(0, int(math.floor(seconds + 1e-9)))
    return f"{total // 60:02d}:{total % 60:02d}"


def format_line(line: TranscriptLine) -> str:
    return f"[{format_mmss(line.start)} - {format_mmss(line.end)}] {line.text}"
