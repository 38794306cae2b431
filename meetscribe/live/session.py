from __future__ import annotations

import logging
import sys
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Protocol

import numpy as np

from meetscribe.app.state import SessionStateTracker
from meetscribe.asr.base import RecognitionEngine
from meetscribe.audio.dsp import downmix
from meetscribe.contracts import CaptureConfig
from meetscribe.errors import EngineError, StreamRuntimeError
from meetscribe.live.buffer import StreamingBuffer
from meetscribe.live.scheduler import ChunkScheduler, _log_event, chunk_size_samples, transcribe_chunk
from meetscribe.live.sink import TranscriptSink


class CaptureDevice(Protocol):
    name: str

    def default_config(self) -> CaptureConfig:
        ...

    def start(self, config: CaptureConfig, on_block, on_error=None):
        ...


@dataclass(frozen=True)
class LiveConfig:
    output_path: Path
    chunk_seconds: float = 5
    language: Optional[str] = None
    echo: bool = True


@dataclass(frozen=True)
class SessionSummary:
    output_path: Path
    chunks: int
    failed_chunks: int
    skipped_ticks: int
    lines: int
    drained_samples: int
    capture: CaptureConfig


def wait_for_enter() -> None:
    """Block until one line (or EOF / Ctrl+C) arrives on stdin."""
    try:
        sys.stdin.readline()
    except KeyboardInterrupt:
        pass


class LiveSession:
    """
    STARTING -> RECORDING -> STOPPING -> DRAINING -> DONE.

    Capture appends to the buffer from the driver thread, the scheduler thread
    transcribes full chunks, and the calling thread blocks on `wait_for_stop`.
    Whatever is left after the scheduler exits is transcribed once more with a
    separate session.
    """

    def __init__(
        self,
        *,
        engine: RecognitionEngine,
        capture: CaptureDevice,
        config: LiveConfig,
        wait_for_stop: Callable[[], None] = wait_for_enter,
        logger: logging.Logger | None = None,
    ) -> None:
        self.engine = engine
        self.capture = capture
        self.config = config
        self.wait_for_stop = wait_for_stop
        self.logger = logger
        self.state = SessionStateTracker()
        self.stop_event = threading.Event()
        self.buffer = StreamingBuffer(chunk_size_samples(config.chunk_seconds))
        self.capture_config: CaptureConfig | None = None
        self.scheduler: ChunkScheduler | None = None
        self._sink: TranscriptSink | None = None
        self._handle: Any = None
        self._thread: threading.Thread | None = None

    def _on_block(self, block: np.ndarray) -> None:
        if self.stop_event.is_set():
            return
        config = self.capture_config
        if config is None:
            raise RuntimeError("capture block received before the session started")
        self.buffer.append(downmix(block, config.channels))

    def _on_stream_error(self, err: StreamRuntimeError) -> None:
        _log_event(self.logger, logging.WARNING, "capture_stream_error", error=str(err))

    def _start(self) -> None:
        self.state.set_starting()
        self.engine.load()
        self.capture_config = self.capture.default_config()
        _log_event(
            self.logger,
            logging.INFO,
            "session_starting",
            device=getattr(self.capture, "name", "unknown"),
            sample_rate=self.capture_config.sample_rate,
            channels=self.capture_config.channels,
            chunk_seconds=self.config.chunk_seconds,
            output=str(self.config.output_path),
        )

        self._sink = TranscriptSink.open(self.config.output_path, echo=self.config.echo)
        self._sink.write_header()

        self.scheduler = ChunkScheduler(
            buffer=self.buffer,
            new_session=self.engine.new_session,
            sink=self._sink,
            sample_rate=self.capture_config.sample_rate,
            chunk_seconds=self.config.chunk_seconds,
            language=self.config.language,
            stop_event=self.stop_event,
            logger=self.logger,
        )
        self._handle = self.capture.start(self.capture_config, self._on_block, self._on_stream_error)
        self._thread = threading.Thread(
            target=self.scheduler.run,
            name="meetscribe-chunk-scheduler",
            daemon=True,
        )
        self._thread.start()
        self.state.set_recording()

    def _stop_capture(self) -> None:
        self.stop_event.set()
        if self._handle is None:
            return
        try:
            self._handle.stop()
        except Exception as e:
            _log_event(self.logger, logging.WARNING, "capture_stop_failed", error=str(e))

    def _join_scheduler(self) -> None:
        self.stop_event.set()
        if self._thread is not None and self._thread.is_alive():
            self._thread.join()

    def _drain(self) -> int:
        if self.scheduler is None or self._sink is None:
            raise RuntimeError("drain requested before the session started")
        self._join_scheduler()
        if self.scheduler.error is not None:
            raise self.scheduler.error

        remaining = self.buffer.take_remaining()
        if len(remaining) == 0:
            return 0
        try:
            lines = transcribe_chunk(
                self.engine.new_session,
                remaining,
                sample_rate=self.scheduler.sample_rate,
                chunk_index=self.scheduler.chunk_index,
                chunk_seconds=self.config.chunk_seconds,
                language=self.config.language,
            )
        except EngineError as e:
            _log_event(
                self.logger,
                logging.ERROR,
                "drain_failed",
                chunk_index=self.scheduler.chunk_index,
                samples=len(remaining),
                error=str(e),
            )
            return len(remaining)
        written = self._sink.write_lines(lines)
        self.scheduler.metrics["lines"] += written
        _log_event(
            self.logger,
            logging.INFO,
            "drain_done",
            chunk_index=self.scheduler.chunk_index,
            samples=len(remaining),
            lines=written,
        )
        return len(remaining)

    def run(self) -> SessionSummary:
        try:
            self._start()
        except BaseException as e:
            self.state.set_error(str(e) or type(e).__name__)
            self._stop_capture()
            self._join_scheduler()
            if self._sink is not None:
                self._sink.close()
            raise

        try:
            try:
                self.wait_for_stop()
            finally:
                self.state.set_stopping()
                self._stop_capture()
                _log_event(self.logger, logging.INFO, "session_stopping", pending=self.buffer.pending())

            self.state.set_draining()
            drained = self._drain()

            self._sink.write_footer()
            self.state.set_done()
        except BaseException as e:
            self.state.set_error(str(e) or type(e).__name__)
            raise
        finally:
            # The scheduler may still be writing an in-flight chunk.
            self._join_scheduler()
            if self._sink is not None:
                self._sink.close()

        metrics = self.scheduler.metrics
        summary = SessionSummary(
            output_path=self._sink.path,
            chunks=metrics["chunks"],
            failed_chunks=metrics["failed"],
            skipped_ticks=metrics["skipped"],
            lines=metrics["lines"],
            drained_samples=drained,
            capture=self.capture_config,
        )
        _log_event(
            self.logger,
            logging.INFO,
            "session_done",
            chunks=summary.chunks,
            failed_chunks=summary.failed_chunks,
            skipped_ticks=summary.skipped_ticks,
            lines=summary.lines,
            drained_samples=drained,
        )
        return summary
