from __future__ import annotations

import logging
import time
from pathlib import Path

from meetscribe.asr.base import RecognitionEngine
from meetscribe.audio.decode import load_audio_file
from meetscribe.contracts import TranscriptLine
from meetscribe.live.scheduler import _log_event
from meetscribe.live.sink import TranscriptSink

FILE_TITLE = "Meeting Minutes - Transcription"


def transcribe_file(
    engine: RecognitionEngine,
    input_path: str | Path,
    output_path: str | Path,
    *,
    language: str | None = None,
    echo: bool = False,
    logger: logging.Logger | None = None,
) -> int:
    """Transcribe a whole file in one request; returns the number of lines written."""
    audio = load_audio_file(input_path, logger=logger)
    print(f"Audio loaded: {len(audio.samples)} samples ({audio.seconds:.1f} seconds)")

    engine.load()
    t0 = time.perf_counter()
    segments = engine.new_session().transcribe(audio.samples, language)
    lines = [TranscriptLine(start=s.start_cs / 100.0, end=s.end_cs / 100.0, text=s.text) for s in segments]
    _log_event(
        logger,
        logging.INFO,
        "file_transcribed",
        input=str(input_path),
        segments=len(lines),
        ms=round((time.perf_counter() - t0) * 1000.0, 2),
    )

    with TranscriptSink.open(output_path, echo=echo) as sink:
        sink.write_text(f"{FILE_TITLE}\nSource: {Path(input_path)}\n\n")
        return sink.write_lines(lines)
