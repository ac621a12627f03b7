from __future__ import annotations

from datetime import date

import pytest

from stillpoint.practice.streak.rules import apply_activity, remaining_grace, resolve_grace_allowance
from stillpoint.practice.streak.types import StreakOutcome, StreakSnapshot


def snapshot(
    *,
    current_streak: int,
    longest_streak: int,
    last_activity_date: date | None,
    grace_used: int = 0,
) -> StreakSnapshot:
    return StreakSnapshot(
        current_streak=current_streak,
        longest_streak=longest_streak,
        last_activity_date=last_activity_date,
        grace_used=grace_used,
    )


def test_first_activity_starts_streak_and_keeps_historic_longest() -> None:
    state_after, outcome = apply_activity(
        snapshot(current_streak=0, longest_streak=9, last_activity_date=None),
        activity_date=date(2024, 1, 1),
        grace_allowance=1,
    )

    assert outcome == StreakOutcome.STARTED
    assert state_after.current_streak == 1
    assert state_after.longest_streak == 9
    assert state_after.last_activity_date == date(2024, 1, 1)


def test_same_day_activity_leaves_state_untouched() -> None:
    state_before = snapshot(current_streak=4, longest_streak=6, last_activity_date=date(2024, 1, 5))

    state_after, outcome = apply_activity(state_before, activity_date=date(2024, 1, 5), grace_allowance=1)

    assert outcome == StreakOutcome.SAME_DAY
    assert state_after == state_before


def test_next_day_activity_continues_and_raises_longest() -> None:
    state_after, outcome = apply_activity(
        snapshot(current_streak=6, longest_streak=6, last_activity_date=date(2024, 1, 5)),
        activity_date=date(2024, 1, 6),
        grace_allowance=1,
    )

    assert outcome == StreakOutcome.CONTINUED
    assert state_after.current_streak == 7
    assert state_after.longest_streak == 7


def test_single_missed_day_within_grace_keeps_streak() -> None:
    state_after, outcome = apply_activity(
        snapshot(current_streak=3, longest_streak=5, last_activity_date=date(2024, 1, 5)),
        activity_date=date(2024, 1, 7),
        grace_allowance=1,
    )

    assert outcome == StreakOutcome.GRACE_APPLIED
    assert state_after.current_streak == 4
    assert state_after.grace_used == 1
    assert state_after.longest_streak == 5


def test_grace_is_consumed_until_streak_resets() -> None:
    state = snapshot(current_streak=3, longest_streak=3, last_activity_date=date(2024, 1, 5), grace_used=1)

    state_after, outcome = apply_activity(state, activity_date=date(2024, 1, 7), grace_allowance=1)

    assert outcome == StreakOutcome.RESET
    assert state_after.current_streak == 1
    assert state_after.grace_used == 0
    assert state_after.longest_streak == 3


def test_long_gap_resets_streak() -> None:
    state = snapshot(current_streak=2, longest_streak=2, last_activity_date=date(2024, 1, 2))

    state_after, outcome = apply_activity(state, activity_date=date(2024, 1, 10), grace_allowance=1)

    assert outcome == StreakOutcome.RESET
    assert state_after.current_streak == 1
    assert state_after.longest_streak == 2
    assert state_after.last_activity_date == date(2024, 1, 10)


def test_back_dated_activity_resets_streak() -> None:
    state = snapshot(current_streak=5, longest_streak=5, last_activity_date=date(2024, 1, 10))

    state_after, outcome = apply_activity(state, activity_date=date(2024, 1, 8), grace_allowance=3)

    assert outcome == StreakOutcome.RESET
    assert state_after.current_streak == 1
    assert state_after.longest_streak == 5


def test_longest_never_drops_below_current_across_sequence() -> None:
    state = snapshot(current_streak=0, longest_streak=0, last_activity_date=None)
    days = [date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 4), date(2024, 1, 5), date(2024, 1, 20)]

    for day in days:
        state, _ = apply_activity(state, activity_date=day, grace_allowance=1)
        assert state.longest_streak >= state.current_streak >= 1

    assert state.longest_streak == 4
    assert state.current_streak == 1


@pytest.mark.parametrize(
    ("plan_grace_days", "expected"),
    [
        (None, 1),
        (0, 0),
        (2, 2),
        (10, 3),
        (-4, 0),
    ],
)
def test_resolve_grace_allowance_uses_default_and_cap(plan_grace_days: int | None, expected: int) -> None:
    assert resolve_grace_allowance(plan_grace_days, default_days=1, cap_days=3) == expected


def test_remaining_grace_never_negative() -> None:
    state = snapshot(current_streak=4, longest_streak=4, last_activity_date=date(2024, 1, 5), grace_used=3)
    assert remaining_grace(state, grace_allowance=1) == 0
    assert remaining_grace(state, grace_allowance=5) == 2
