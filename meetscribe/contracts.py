from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Segment:
    """
    One phrase returned by the recognition engine.
    start_cs/end_cs: centiseconds from the first sample of the transcribed sequence.
    """
    start_cs: int
    end_cs: int
    text: str


@dataclass(frozen=True)
class TranscriptLine:
    start: float  # seconds since session start
    end: float
    text: str


@dataclass(frozen=True)
class CaptureConfig:
    sample_rate: int
    channels: int


@dataclass(frozen=True)
class SupportedConfig:
    channels: int
    min_sample_rate: int
    max_sample_rate: int

    def with_max_sample_rate(self) -> CaptureConfig:
        return CaptureConfig(sample_rate=self.max_sample_rate, channels=self.channels)
