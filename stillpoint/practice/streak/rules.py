from __future__ import annotations

from dataclasses import replace
from datetime import date

from stillpoint.practice.streak.types import StreakOutcome, StreakSnapshot


def resolve_grace_allowance(plan_grace_days: int | None, *, default_days: int, cap_days: int) -> int:
    allowance = default_days if plan_grace_days is None else plan_grace_days
    return max(0, min(allowance, cap_days))


def remaining_grace(snapshot: StreakSnapshot, *, grace_allowance: int) -> int:
    return max(0, grace_allowance - snapshot.grace_used)


def start_streak(activity_date: date) -> StreakSnapshot:
    return StreakSnapshot(
        current_streak=1,
        longest_streak=1,
        last_activity_date=activity_date,
        grace_used=0,
    )


def apply_activity(
    snapshot: StreakSnapshot,
    *,
    activity_date: date,
    grace_allowance: int,
) -> tuple[StreakSnapshot, StreakOutcome]:
    if snapshot.last_activity_date is None:
        started = start_streak(activity_date)
        return replace(started, longest_streak=max(snapshot.longest_streak, 1)), StreakOutcome.STARTED

    gap = (activity_date - snapshot.last_activity_date).days
    if gap == 0:
        return snapshot, StreakOutcome.SAME_DAY

    if gap == 1:
        current_streak = snapshot.current_streak + 1
        updated = replace(
            snapshot,
            current_streak=current_streak,
            longest_streak=max(snapshot.longest_streak, current_streak),
            last_activity_date=activity_date,
        )
        return updated, StreakOutcome.CONTINUED

    missed_days = gap - 1
    if gap > 1 and missed_days <= remaining_grace(snapshot, grace_allowance=grace_allowance):
        current_streak = snapshot.current_streak + 1
        updated = replace(
            snapshot,
            current_streak=current_streak,
            longest_streak=max(snapshot.longest_streak, current_streak),
            last_activity_date=activity_date,
            grace_used=snapshot.grace_used + missed_days,
        )
        return updated, StreakOutcome.GRACE_APPLIED

    # Back-dated activity (gap < 0) also lands here.
    updated = replace(
        snapshot,
        current_streak=1,
        longest_streak=max(snapshot.longest_streak, 1),
        last_activity_date=activity_date,
        grace_used=0,
    )
    return updated, StreakOutcome.RESET
