from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class DashboardSummary:
    total_sessions: int
    total_minutes: int
    current_streak: int
    token_balance: int
    active_goals: int
    unread_notifications: int
    enrolled_courses: int


@dataclass(slots=True)
class PeriodTotals:
    sessions: int
    minutes: int


@dataclass(slots=True)
class ProgressStats:
    weekly: PeriodTotals
    monthly: PeriodTotals
    breathing_sessions: int
    courses_completed: int
    badges_earned: int
    longest_streak: int
