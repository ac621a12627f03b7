from __future__ import annotations

import pytest

from stillpoint.practice.sessions.errors import SessionTransitionError, SessionValidationError
from stillpoint.practice.sessions.rules import ensure_transition, is_idempotent_repeat, is_terminal, parse_status
from stillpoint.practice.sessions.types import SessionStatus


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (SessionStatus.IN_PROGRESS, SessionStatus.PAUSED),
        (SessionStatus.PAUSED, SessionStatus.IN_PROGRESS),
        (SessionStatus.IN_PROGRESS, SessionStatus.COMPLETED),
        (SessionStatus.PAUSED, SessionStatus.COMPLETED),
        (SessionStatus.PAUSED, SessionStatus.ABANDONED),
    ],
)
def test_allowed_transitions(current: SessionStatus, target: SessionStatus) -> None:
    ensure_transition(current, target)


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (SessionStatus.COMPLETED, SessionStatus.IN_PROGRESS),
        (SessionStatus.COMPLETED, SessionStatus.ABANDONED),
        (SessionStatus.ABANDONED, SessionStatus.COMPLETED),
        (SessionStatus.ABANDONED, SessionStatus.PAUSED),
    ],
)
def test_terminal_states_reject_transitions(current: SessionStatus, target: SessionStatus) -> None:
    with pytest.raises(SessionTransitionError):
        ensure_transition(current, target)


def test_terminal_statuses() -> None:
    assert is_terminal(SessionStatus.COMPLETED) is True
    assert is_terminal(SessionStatus.ABANDONED) is True
    assert is_terminal(SessionStatus.PAUSED) is False


def test_repeat_of_current_status_is_idempotent() -> None:
    assert is_idempotent_repeat(SessionStatus.COMPLETED, SessionStatus.COMPLETED) is True
    assert is_idempotent_repeat(SessionStatus.PAUSED, SessionStatus.COMPLETED) is False


def test_parse_status_rejects_unknown_value() -> None:
    assert parse_status("paused") == SessionStatus.PAUSED
    with pytest.raises(SessionValidationError):
        parse_status("sleeping")
