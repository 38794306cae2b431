from __future__ import annotations

import numpy as np

WHISPER_SAMPLE_RATE = 16000


def as_float32(samples) -> np.ndarray:
    return np.asarray(samples, dtype=np.float32).reshape(-1)


def downmix(interleaved, channels: int) -> np.ndarray:
    """Average interleaved frames down to one sample per frame."""
    if channels < 1:
        raise ValueError("channels must be >= 1")
    data = as_float32(interleaved)
    if channels == 1:
        return data
    frames = len(data) // channels
    if frames == 0:
        return np.zeros(0, dtype=np.float32)
    framed = data[: frames * channels].reshape(frames, channels)
    return framed.sum(axis=1, dtype=np.float32) / np.float32(channels)


def resample(samples, from_rate: int, to_rate: int) -> np.ndarray:
    """
    Linear-interpolation resampler (not band-limited).
    Output length is floor(len(samples) * to_rate / from_rate).
    """
    if from_rate <= 0 or to_rate <= 0:
        raise ValueError("sample rates must be > 0")
    data = as_float32(samples)
    if from_rate == to_rate:
        return data.copy()

    n = len(data)
    ratio = float(to_rate) / float(from_rate)
    new_len = int(n * ratio)
    if n == 0 or new_len <= 0:
        return np.zeros(0, dtype=np.float32)

    src_pos = np.arange(new_len, dtype=np.float64) / ratio
    src_idx = src_pos.astype(np.int64)
    frac = src_pos - src_idx

    # Tail positions whose src_idx falls past the input emit nothing.
    keep = src_idx < n
    src_idx = src_idx[keep]
    frac = frac[keep]

    wide = data.astype(np.float64)
    out = wide[src_idx].copy()
    interp = src_idx + 1 < n
    lo = src_idx[interp]
    out[interp] = wide[lo] * (1.0 - frac[interp]) + wide[lo + 1] * frac[interp]
    return out.astype(np.float32)
