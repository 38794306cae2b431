from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from meetscribe.contracts import Segment


class RecognitionSession(ABC):
    @abstractmethod
    def transcribe(self, samples, language: Optional[str] = None) -> List[Segment]:
        """Return segments with centisecond times relative to the first of `samples` (16 kHz mono)."""
        raise NotImplementedError


class RecognitionEngine(ABC):
    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def load(self) -> None: ...

    @abstractmethod
    def new_session(self) -> RecognitionSession: ...
