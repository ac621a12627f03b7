from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum


class StreakOutcome(str, Enum):
    STARTED = "STARTED"
    SAME_DAY = "SAME_DAY"
    CONTINUED = "CONTINUED"
    GRACE_APPLIED = "GRACE_APPLIED"
    RESET = "RESET"


@dataclass(slots=True)
class StreakSnapshot:
    current_streak: int
    longest_streak: int
    last_activity_date: date | None
    grace_used: int


@dataclass(slots=True)
class StreakUpdateResult:
    streak_type: str
    outcome: StreakOutcome
    current_streak: int
    longest_streak: int
    grace_used: int
    last_activity_date: date
