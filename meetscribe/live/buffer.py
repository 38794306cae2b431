from __future__ import annotations

import threading
from typing import Optional

import numpy as np

from meetscribe.audio.dsp import as_float32


class StreamingBuffer:
    """
    Growable mono sample store shared by the capture callback and the chunk scheduler.

    The capture side only appends. `last_processed` marks how many leading samples
    were already dispatched; it only moves forward and never passes the end.
    """

    def __init__(self, chunk_size_samples: int, initial_capacity: int = 16000 * 30) -> None:
        if chunk_size_samples <= 0:
            raise ValueError("chunk_size_samples must be > 0")
        self.chunk_size_samples = int(chunk_size_samples)
        self._data = np.zeros(max(1, int(initial_capacity)), dtype=np.float32)
        self._length = 0
        self._last_processed = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return self._length

    @property
    def last_processed(self) -> int:
        with self._lock:
            return self._last_processed

    def pending(self) -> int:
        with self._lock:
            return self._length - self._last_processed

    def append(self, samples) -> None:
        block = as_float32(samples)
        n = len(block)
        if n == 0:
            return
        with self._lock:
            needed = self._length + n
            if needed > len(self._data):
                capacity = len(self._data)
                while capacity < needed:
                    capacity *= 2
                grown = np.zeros(capacity, dtype=np.float32)
                grown[: self._length] = self._data[: self._length]
                self._data = grown
            self._data[self._length : needed] = block
            self._length = needed

    def snapshot_tail(self) -> Optional[np.ndarray]:
        """Copy of everything past the cursor, or None while it is shorter than one chunk."""
        with self._lock:
            if self._length - self._last_processed < self.chunk_size_samples:
                return None
            return self._data[self._last_processed : self._length].copy()

    def advance_cursor(self, n: int) -> None:
        if n < 0:
            raise ValueError("cursor can only move forward")
        with self._lock:
            if self._last_processed + n > self._length:
                raise ValueError(
                    f"cannot advance cursor by {n}: only {self._length - self._last_processed} pending"
                )
            self._last_processed += n

    def take_remaining(self) -> np.ndarray:
        """Copy the whole unprocessed tail regardless of length and consume it."""
        with self._lock:
            tail = self._data[self._last_processed : self._length].copy()
            self._last_processed = self._length
            return tail
