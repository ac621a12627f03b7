from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from uuid import UUID


class GoalType(str, Enum):
    TOTAL_SESSIONS = "total_sessions"
    TOTAL_MINUTES = "total_minutes"
    STREAK_DAYS = "streak_days"
    WEEKLY_SESSIONS = "weekly_sessions"


@dataclass(slots=True)
class GoalSnapshot:
    goal_type: GoalType
    target_value: int
    current_value: int
    is_active: bool
    deadline: date | None
    completed_at: datetime | None


@dataclass(frozen=True, slots=True)
class ActivityProgress:
    """Aggregates observed after one completed activity."""

    activity_date: date
    sessions_delta: int
    minutes_delta: int
    overall_streak: int
    weekly_sessions: int


@dataclass(slots=True)
class GoalView:
    goal_id: UUID
    title: str
    description: str | None
    goal_type: str
    target_value: int
    current_value: int
    is_active: bool
    deadline: date | None
    completed_at: datetime | None
