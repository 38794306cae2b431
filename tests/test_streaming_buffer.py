from __future__ import annotations

import threading

import numpy as np
import pytest

from meetscribe.live.buffer import StreamingBuffer


def test_snapshot_tail_waits_for_a_full_chunk() -> None:
    buf = StreamingBuffer(chunk_size_samples=100)
    buf.append(np.zeros(99, dtype=np.float32))
    assert buf.snapshot_tail() is None
    assert buf.last_processed == 0

    buf.append(np.ones(1, dtype=np.float32))
    tail = buf.snapshot_tail()
    assert tail is not None
    assert len(tail) == 100
    assert buf.last_processed == 0  # snapshot alone never consumes


def test_snapshot_is_a_copy() -> None:
    buf = StreamingBuffer(chunk_size_samples=2)
    buf.append([0.1, 0.2, 0.3])
    tail = buf.snapshot_tail()
    tail[:] = 9.0
    assert np.allclose(buf.take_remaining(), [0.1, 0.2, 0.3])


def test_advance_cursor_moves_past_consumed_samples() -> None:
    buf = StreamingBuffer(chunk_size_samples=3)
    buf.append([1.0, 2.0, 3.0, 4.0])
    tail = buf.snapshot_tail()
    buf.append([5.0])
    buf.advance_cursor(len(tail))
    assert buf.last_processed == 4
    assert buf.pending() == 1
    assert buf.snapshot_tail() is None
    assert np.allclose(buf.take_remaining(), [5.0])
    assert buf.last_processed == len(buf) == 5


def test_advance_cursor_never_passes_end_or_goes_back() -> None:
    buf = StreamingBuffer(chunk_size_samples=1)
    buf.append([0.0, 0.0])
    with pytest.raises(ValueError):
        buf.advance_cursor(3)
    with pytest.raises(ValueError):
        buf.advance_cursor(-1)
    assert buf.last_processed == 0


def test_append_grows_past_initial_capacity() -> None:
    buf = StreamingBuffer(chunk_size_samples=10, initial_capacity=4)
    for i in range(10):
        buf.append(np.full(3, i, dtype=np.float32))
    out = buf.take_remaining()
    assert len(out) == 30
    assert out[0] == 0.0 and out[-1] == 9.0


def test_take_remaining_on_empty_buffer() -> None:
    buf = StreamingBuffer(chunk_size_samples=10)
    assert len(buf.take_remaining()) == 0


def test_concurrent_appends_lose_nothing() -> None:
    buf = StreamingBuffer(chunk_size_samples=10, initial_capacity=8)
    block = np.ones(50, dtype=np.float32)

    def writer() -> None:
        for _ in range(200):
            buf.append(block)

    threads = [threading.Thread(target=writer) for _ in range(4)]
    for t in threads:
        t.start()
    consumed = 0
    while any(t.is_alive() for t in threads):
        tail = buf.snapshot_tail()
        if tail is not None:
            buf.advance_cursor(len(tail))
            consumed += len(tail)
    for t in threads:
        t.join()
    consumed += len(buf.take_remaining())
    assert consumed == 4 * 200 * 50
