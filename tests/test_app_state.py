from __future__ import annotations

import pytest

from meetscribe.app.state import SessionState, SessionStateTracker


def test_state_tracker_happy_path() -> None:
    tracker = SessionStateTracker()
    assert tracker.state == SessionState.IDLE
    assert tracker.last_error is None

    tracker.set_starting()
    assert tracker.state == SessionState.STARTING
    tracker.set_recording()
    assert tracker.state == SessionState.RECORDING
    tracker.set_stopping()
    assert tracker.state == SessionState.STOPPING
    tracker.set_draining()
    assert tracker.state == SessionState.DRAINING
    tracker.set_done()
    assert tracker.state == SessionState.DONE


def test_state_tracker_rejects_skipping_ahead() -> None:
    tracker = SessionStateTracker()
    tracker.set_starting()
    with pytest.raises(RuntimeError):
        tracker.set_draining()
    assert tracker.state == SessionState.STARTING


def test_state_tracker_error_records_detail() -> None:
    tracker = SessionStateTracker()
    tracker.set_starting()
    tracker.set_error("boom")
    assert tracker.state == SessionState.ERROR
    assert tracker.last_error == "boom"
    assert tracker.history == [SessionState.STARTING, SessionState.ERROR]
