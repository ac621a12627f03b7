from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from stillpoint.practice.activity.types import ActivityResult


class SessionStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    PAUSED = "paused"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


TERMINAL_STATUSES = frozenset({SessionStatus.COMPLETED, SessionStatus.ABANDONED})


@dataclass(slots=True)
class MeditationSessionView:
    session_id: UUID
    status: SessionStatus
    duration_minutes: int
    total_minutes_meditated: int | None
    started_at: datetime
    completed_at: datetime | None
    idempotent_replay: bool = False
    activity: ActivityResult | None = None


@dataclass(slots=True)
class BreathingSessionView:
    session_id: UUID
    pattern_name: str
    rounds_completed: int
    total_duration_seconds: int
    completed_at: datetime | None
    idempotent_replay: bool = False
    activity: ActivityResult | None = None


@dataclass(slots=True)
class CourseProgressView:
    course_session_id: UUID
    last_position_seconds: int
    completed_at: datetime | None
    newly_completed: bool = False
    activity: ActivityResult | None = None
