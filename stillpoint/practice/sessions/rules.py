from __future__ import annotations

from stillpoint.practice.sessions.errors import SessionTransitionError, SessionValidationError
from stillpoint.practice.sessions.types import TERMINAL_STATUSES, SessionStatus

ALLOWED_TRANSITIONS: dict[SessionStatus, frozenset[SessionStatus]] = {
    SessionStatus.IN_PROGRESS: frozenset(
        {SessionStatus.PAUSED, SessionStatus.COMPLETED, SessionStatus.ABANDONED}
    ),
    SessionStatus.PAUSED: frozenset(
        {SessionStatus.IN_PROGRESS, SessionStatus.COMPLETED, SessionStatus.ABANDONED}
    ),
    SessionStatus.COMPLETED: frozenset(),
    SessionStatus.ABANDONED: frozenset(),
}


def parse_status(raw_status: str) -> SessionStatus:
    try:
        return SessionStatus(raw_status)
    except ValueError as exc:
        raise SessionValidationError(f"unknown session status: {raw_status!r}") from exc


def is_terminal(status: SessionStatus) -> bool:
    return status in TERMINAL_STATUSES


def ensure_transition(current: SessionStatus, target: SessionStatus) -> None:
    if target not in ALLOWED_TRANSITIONS[current]:
        raise SessionTransitionError(f"cannot move session from {current.value} to {target.value}")


def is_idempotent_repeat(current: SessionStatus, target: SessionStatus) -> bool:
    return current == target
