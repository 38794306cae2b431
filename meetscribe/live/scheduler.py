from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, List, Optional

import numpy as np

from meetscribe.asr.base import RecognitionSession
from meetscribe.audio.dsp import WHISPER_SAMPLE_RATE, resample
from meetscribe.contracts import TranscriptLine
from meetscribe.errors import EngineError
from meetscribe.live.buffer import StreamingBuffer
from meetscribe.live.sink import TranscriptSink
from meetscribe.live.timestamps import merge_segment


def _log_event(logger: logging.Logger | None, level: int, event: str, **fields: Any) -> None:
    if logger is None:
        return
    logger.log(level, event, extra=fields)


def chunk_size_samples(chunk_seconds: float) -> int:
    return max(1, int(chunk_seconds * WHISPER_SAMPLE_RATE))


def transcribe_chunk(
    new_session: Callable[[], RecognitionSession],
    raw: np.ndarray,
    *,
    sample_rate: int,
    chunk_index: int,
    chunk_seconds: float,
    language: Optional[str],
) -> List[TranscriptLine]:
    """
    Resample one chunk to 16 kHz, run it through a fresh session and place the
    segments on the session timeline. Raises EngineError on failure.
    """
    samples = raw if sample_rate == WHISPER_SAMPLE_RATE else resample(raw, sample_rate, WHISPER_SAMPLE_RATE)
    session = new_session()
    segments = session.transcribe(samples, language)
    return [merge_segment(chunk_index, seg, chunk_seconds) for seg in segments]


class ChunkScheduler:
    """
    Periodic worker: every `chunk_seconds` take whatever audio accumulated past the
    cursor (if at least one chunk's worth), transcribe it and append the lines.

    A tick that finds too little audio does nothing; the chunk index is not
    advanced, so later timestamps lag real time by the skipped period.
    """

    def __init__(
        self,
        *,
        buffer: StreamingBuffer,
        new_session: Callable[[], RecognitionSession],
        sink: TranscriptSink,
        sample_rate: int,
        chunk_seconds: float,
        language: Optional[str],
        stop_event: threading.Event,
        logger: logging.Logger | None = None,
    ) -> None:
        if chunk_seconds <= 0:
            raise ValueError("chunk_seconds must be > 0")
        if sample_rate <= 0:
            raise ValueError("sample_rate must be > 0")
        self.buffer = buffer
        self.new_session = new_session
        self.sink = sink
        self.sample_rate = int(sample_rate)
        self.chunk_seconds = chunk_seconds
        self.language = language
        self.stop_event = stop_event
        self.logger = logger
        self.chunk_index = 0
        self.error: BaseException | None = None
        self.metrics: dict[str, int] = {"ticks": 0, "skipped": 0, "chunks": 0, "failed": 0, "lines": 0}

    def tick(self) -> bool:
        """Process at most one chunk. Returns True when a chunk was consumed."""
        self.metrics["ticks"] += 1
        if self.stop_event.is_set():
            return False

        raw = self.buffer.snapshot_tail()
        if raw is None:
            self.metrics["skipped"] += 1
            _log_event(
                self.logger,
                logging.DEBUG,
                "tick_skipped",
                chunk_index=self.chunk_index,
                pending=self.buffer.pending(),
            )
            return False

        index = self.chunk_index
        t0 = time.perf_counter()
        try:
            lines = transcribe_chunk(
                self.new_session,
                raw,
                sample_rate=self.sample_rate,
                chunk_index=index,
                chunk_seconds=self.chunk_seconds,
                language=self.language,
            )
        except EngineError as e:
            self.metrics["failed"] += 1
            _log_event(
                self.logger,
                logging.ERROR,
                "chunk_failed",
                chunk_index=index,
                samples=len(raw),
                error=str(e),
            )
            lines = []
        else:
            self.metrics["chunks"] += 1

        # Sink errors propagate; bookkeeping below must not run for lost writes.
        written = self.sink.write_lines(lines)
        self.metrics["lines"] += written

        self.chunk_index = index + 1
        self.buffer.advance_cursor(len(raw))
        _log_event(
            self.logger,
            logging.INFO,
            "chunk_done",
            chunk_index=index,
            samples=len(raw),
            lines=written,
            ms=round((time.perf_counter() - t0) * 1000.0, 2),
        )
        return True

    def run(self) -> None:
        _log_event(
            self.logger,
            logging.INFO,
            "scheduler_start",
            chunk_seconds=self.chunk_seconds,
            sample_rate=self.sample_rate,
            language=self.language,
        )
        try:
            while not self.stop_event.wait(self.chunk_seconds):
                self.tick()
        except OSError as e:
            self.error = e
            self.stop_event.set()
            _log_event(self.logger, logging.ERROR, "scheduler_write_failed", error=str(e))
        finally:
            _log_event(self.logger, logging.INFO, "scheduler_stop", **self.metrics)
