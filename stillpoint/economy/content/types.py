from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from stillpoint.economy.tokens.types import BalanceChanged


@dataclass(slots=True)
class ContentPurchaseResult:
    entity_type: str
    entity_id: UUID
    new_balance: int
    idempotent_replay: bool
    transaction_id: UUID | None = None
    event: BalanceChanged | None = None


@dataclass(slots=True)
class UserPurchaseView:
    purchase_id: UUID
    entity_type: str
    entity_id: UUID
    token_cost: int
    transaction_id: UUID | None
    purchased_at: datetime


@dataclass(slots=True)
class CourseWithProgress:
    course_id: UUID
    course_title: str
    course_description: str | None
    teacher_name: str | None
    total_sessions: int
    completed_sessions: int
    progress_percentage: int


@dataclass(slots=True)
class CatalogCourse:
    course_id: UUID
    title: str
    description: str | None
    teacher_name: str | None
    token_cost: int
    session_count: int
    created_at: datetime
    has_access: bool
