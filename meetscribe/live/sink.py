from __future__ import annotations

import os
import threading
from datetime import datetime
from pathlib import Path
from typing import IO, Iterable, Optional

from meetscribe.contracts import TranscriptLine
from meetscribe.live.timestamps import format_line

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
LIVE_TITLE = "Meeting Minutes - Live Transcription"


def _now_text(now: Optional[datetime] = None) -> str:
    return (now or datetime.now()).strftime(TIMESTAMP_FORMAT)


class TranscriptSink:
    """
    Append-only transcript file shared by the scheduler thread and the main thread.
    Every write is flushed and fsynced before the lock is released.
    """

    def __init__(self, fh: IO[str], path: Path, *, echo: bool = False) -> None:
        self._fh = fh
        self.path = path
        self.echo = echo
        self._lock = threading.Lock()
        self._closed = False
        self.lines_written = 0

    @classmethod
    def open(cls, path: str | Path, *, echo: bool = False) -> "TranscriptSink":
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        fh = p.open("w", encoding="utf-8", newline="\n")
        return cls(fh, p, echo=echo)

    def __enter__(self) -> "TranscriptSink":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def _write_locked(self, text: str) -> None:
        self._fh.write(text)
        self._fh.flush()
        os.fsync(self._fh.fileno())

    def write_text(self, text: str) -> None:
        with self._lock:
            if self._closed:
                raise ValueError("write to closed transcript sink")
            self._write_locked(text)

    def write_header(self, title: str = LIVE_TITLE, now: Optional[datetime] = None) -> None:
        self.write_text(f"{title}\nStarted: {_now_text(now)}\n\n")

    def write_lines(self, lines: Iterable[TranscriptLine]) -> int:
        rendered = [format_line(line) for line in lines]
        if not rendered:
            return 0
        with self._lock:
            if self._closed:
                raise ValueError("write to closed transcript sink")
            self._write_locked("".join(f"{r}\n" for r in rendered))
            self.lines_written += len(rendered)
        if self.echo:
            for r in rendered:
                print(r, flush=True)
        return len(rendered)

    def write_footer(self, now: Optional[datetime] = None) -> None:
        self.write_text(f"\nEnded: {_now_text(now)}\n")

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._fh.close()
