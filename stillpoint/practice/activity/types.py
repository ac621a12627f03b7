from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID

from stillpoint.practice.badges.types import AwardedBadge
from stillpoint.practice.streak.types import StreakUpdateResult


class ActivityKind(str, Enum):
    MEDITATION = "meditation"
    BREATHING = "breathing"
    COURSE = "course"


@dataclass(slots=True)
class ActivityResult:
    kind: ActivityKind
    streaks: list[StreakUpdateResult] = field(default_factory=list)
    completed_goal_ids: list[UUID] = field(default_factory=list)
    awarded_badges: list[AwardedBadge] = field(default_factory=list)
