from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

PLAN_FREQUENCIES = frozenset({"daily", "weekly"})


@dataclass(slots=True)
class PracticePlanView:
    plan_id: UUID
    frequency: str
    target_sessions_per_week: int | None
    target_minutes_per_week: int | None
    grace_days: int
    effective_grace_days: int
    is_active: bool
