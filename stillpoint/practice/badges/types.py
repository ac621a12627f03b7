from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

REQUIREMENT_TOTAL_SESSIONS = "total_sessions"
REQUIREMENT_TOTAL_MINUTES = "total_minutes"
REQUIREMENT_STREAK_DAYS = "streak_days"
REQUIREMENT_BREATHING_SESSIONS = "breathing_sessions"
REQUIREMENT_COURSES_COMPLETED = "courses_completed"


@dataclass(frozen=True, slots=True)
class BadgeDefinition:
    name: str
    description: str
    icon: str
    category: str
    requirement_type: str
    requirement_value: int | None
    tier: str | None


@dataclass(frozen=True, slots=True)
class BadgeRule:
    badge_id: UUID
    name: str
    requirement_type: str
    requirement_value: int | None


@dataclass(frozen=True, slots=True)
class UserStats:
    total_sessions: int
    total_minutes: int
    longest_streak: int
    breathing_sessions: int
    courses_completed: int


@dataclass(slots=True)
class AwardedBadge:
    badge_id: UUID
    name: str
    earned_at: datetime
