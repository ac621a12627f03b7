from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from stillpoint.practice.goals.types import ActivityProgress, GoalSnapshot, GoalType


def progress_value(snapshot: GoalSnapshot, progress: ActivityProgress) -> int:
    if snapshot.goal_type == GoalType.TOTAL_SESSIONS:
        return snapshot.current_value + progress.sessions_delta
    if snapshot.goal_type == GoalType.TOTAL_MINUTES:
        return snapshot.current_value + progress.minutes_delta
    if snapshot.goal_type == GoalType.STREAK_DAYS:
        return max(snapshot.current_value, progress.overall_streak)
    return max(snapshot.current_value, progress.weekly_sessions)


def complete_if_reached(snapshot: GoalSnapshot, *, now_utc: datetime) -> tuple[GoalSnapshot, bool]:
    if not snapshot.is_active or snapshot.current_value < snapshot.target_value:
        return snapshot, False
    return replace(snapshot, is_active=False, completed_at=now_utc), True


def apply_progress(
    snapshot: GoalSnapshot,
    *,
    progress: ActivityProgress,
    now_utc: datetime,
) -> tuple[GoalSnapshot, bool]:
    if not snapshot.is_active:
        return snapshot, False
    if snapshot.deadline is not None and progress.activity_date > snapshot.deadline:
        return snapshot, False

    new_value = max(snapshot.current_value, progress_value(snapshot, progress))
    return complete_if_reached(replace(snapshot, current_value=new_value), now_utc=now_utc)
