from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SessionState(str, Enum):
    IDLE = "idle"
    STARTING = "starting"
    RECORDING = "recording"
    STOPPING = "stopping"
    DRAINING = "draining"
    DONE = "done"
    ERROR = "error"


_NEXT: dict[SessionState, SessionState] = {
    SessionState.IDLE: SessionState.STARTING,
    SessionState.STARTING: SessionState.RECORDING,
    SessionState.RECORDING: SessionState.STOPPING,
    SessionState.STOPPING: SessionState.DRAINING,
    SessionState.DRAINING: SessionState.DONE,
}


@dataclass
class SessionStateTracker:
    state: SessionState = SessionState.IDLE
    last_error: str | None = None
    history: list[SessionState] = field(default_factory=list)

    def _move(self, target: SessionState) -> None:
        if _NEXT.get(self.state) != target:
            raise RuntimeError(f"invalid transition {self.state.value} -> {target.value}")
        self.state = target
        self.history.append(target)

    def set_starting(self) -> None:
        self._move(SessionState.STARTING)
        self.last_error = None

    def set_recording(self) -> None:
        self._move(SessionState.RECORDING)

    def set_stopping(self) -> None:
        self._move(SessionState.STOPPING)

    def set_draining(self) -> None:
        self._move(SessionState.DRAINING)

    def set_done(self) -> None:
        self._move(SessionState.DONE)

    def set_error(self, detail: str) -> None:
        self.state = SessionState.ERROR
        self.last_error = detail
        self.history.append(SessionState.ERROR)
