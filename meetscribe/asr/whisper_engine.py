from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional

import numpy as np

from meetscribe.asr.base import RecognitionEngine, RecognitionSession
from meetscribe.contracts import Segment
from meetscribe.errors import EngineError, SegmentError, StartupError

_logger = logging.getLogger("meetscribe.asr")


@dataclass(frozen=True)
class TranscribeOptions:
    """How to run one transcription request; shared by file mode and live chunks."""
    language: Optional[str] = None  # None = auto-detect
    task: str = "transcribe"
    beam_size: int = 1
    best_of: int = 1
    temperature: float = 0.0
    suppress_blank: bool = True
    vad_filter: bool = False
    condition_on_previous_text: bool = False

    def with_language(self, language: Optional[str]) -> "TranscribeOptions":
        return replace(self, language=language)

    def as_kwargs(self) -> Dict[str, Any]:
        return {
            "language": self.language,
            "task": self.task,
            "beam_size": self.beam_size,
            "best_of": self.best_of,
            "temperature": self.temperature,
            "suppress_blank": self.suppress_blank,
            "vad_filter": self.vad_filter,
            "condition_on_previous_text": self.condition_on_previous_text,
        }


def _to_centiseconds(seconds: Any) -> int:
    value = float(seconds)
    if value != value or value < 0:  # NaN or negative
        raise SegmentError(f"invalid segment time: {seconds!r}")
    return int(round(value * 100.0))


def _to_segment(raw: Any) -> Segment:
    try:
        start_cs = _to_centiseconds(raw.start)
        end_cs = _to_centiseconds(raw.end)
        text = str(raw.text or "").strip()
    except (AttributeError, TypeError, ValueError) as e:
        raise SegmentError(f"unreadable segment: {e}") from e
    if end_cs < start_cs:
        raise SegmentError(f"segment ends before it starts: {start_cs}-{end_cs}")
    return Segment(start_cs=start_cs, end_cs=end_cs, text=text)


class WhisperSession(RecognitionSession):
    """
    One caller's handle on a loaded model. Not shareable: a second
    concurrent transcribe() on the same session is rejected.
    """

    def __init__(self, model: Any, options: TranscribeOptions, logger: Optional[logging.Logger] = None) -> None:
        self._model = model
        self.options = options
        self._busy = threading.Lock()
        self._logger = logger or _logger

    def transcribe(self, samples, language: Optional[str] = None) -> List[Segment]:
        if not self._busy.acquire(blocking=False):
            raise EngineError("session is already transcribing; create one session per caller")
        try:
            return self._transcribe(samples, language)
        finally:
            self._busy.release()

    def _transcribe(self, samples, language: Optional[str]) -> List[Segment]:
        audio = np.asarray(samples, dtype=np.float32).reshape(-1)
        if len(audio) == 0:
            return []
        opts = self.options.with_language(language if language is not None else self.options.language)
        try:
            raw_segments, _info = self._model.transcribe(audio, **opts.as_kwargs())
            raw_list = list(raw_segments)
        except Exception as e:
            raise EngineError(f"transcription failed: {e}") from e

        out: List[Segment] = []
        for i, raw in enumerate(raw_list):
            try:
                seg = _to_segment(raw)
            except SegmentError as e:
                self._logger.warning("segment_skipped", extra={"segment": i, "reason": str(e)})
                continue
            if not seg.text:
                continue
            out.append(seg)
        return out


class WhisperEngine(RecognitionEngine):
    """Shared faster-whisper model handle. Sessions are cheap; the model is loaded once."""

    def __init__(
        self,
        model: str = "base",
        *,
        device: str = "cpu",
        compute_type: str = "int8",
        options: Optional[TranscribeOptions] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.model = model
        self.device = device
        self.compute_type = compute_type
        self.options = options or TranscribeOptions()
        self._logger = logger or _logger
        self._model = None
        self._load_lock = threading.Lock()

    @property
    def name(self) -> str:
        return "faster-whisper"

    def _get_model(self):
        with self._load_lock:
            if self._model is None:
                from faster_whisper import WhisperModel

                self._model = WhisperModel(
                    self.model,
                    device=self.device,
                    compute_type=self.compute_type,
                )
            return self._model

    def load(self) -> None:
        try:
            self._get_model()
        except Exception as e:
            raise StartupError(f"Failed to load Whisper model from {self.model}: {e}") from e
        self._logger.info(
            "model_loaded",
            extra={"model": self.model, "device": self.device, "compute_type": self.compute_type},
        )

    def new_session(self) -> WhisperSession:
        try:
            model = self._get_model()
        except Exception as e:
            raise EngineError(f"Failed to create Whisper session: {e}") from e
        return WhisperSession(model, self.options, logger=self._logger)
