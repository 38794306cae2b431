from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np
import soundfile as sf

from meetscribe.audio.dsp import WHISPER_SAMPLE_RATE, downmix, resample
from meetscribe.errors import AudioFileError


@dataclass(frozen=True)
class DecodedAudio:
    samples: np.ndarray  # mono float32 at WHISPER_SAMPLE_RATE
    source_rate: int
    source_channels: int

    @property
    def seconds(self) -> float:
        return len(self.samples) / float(WHISPER_SAMPLE_RATE)


def load_audio_file(path: str | Path, logger: Optional[logging.Logger] = None) -> DecodedAudio:
    """Decode a file into mono 16 kHz float32 samples."""
    p = Path(path)
    if not p.exists():
        raise AudioFileError(f"Failed to open audio file: {p}")
    try:
        data, sample_rate = sf.read(str(p), dtype="float32", always_2d=True)
    except RuntimeError as e:  # soundfile.LibsndfileError
        raise AudioFileError(f"Failed to decode audio file {p}: {e}") from e

    channels = int(data.shape[1]) if data.ndim == 2 else 1
    mono = downmix(data.reshape(-1), channels)
    if logger is not None:
        logger.info(
            "audio_decoded",
            extra={"path": str(p), "sample_rate": int(sample_rate), "channels": channels, "samples": len(mono)},
        )
    if int(sample_rate) != WHISPER_SAMPLE_RATE:
        mono = resample(mono, int(sample_rate), WHISPER_SAMPLE_RATE)
    if len(mono) == 0:
        raise AudioFileError(f"No audio samples found in file: {p}")
    return DecodedAudio(samples=mono, source_rate=int(sample_rate), source_channels=channels)
