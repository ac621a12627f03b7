from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from stillpoint.db.models.base import Base


class PracticePlan(Base):
    __tablename__ = "practice_plans"
    __table_args__ = (
        CheckConstraint("frequency IN ('daily','weekly')", name="ck_practice_plans_frequency"),
        CheckConstraint("grace_days >= 0", name="ck_practice_plans_grace_days_non_negative"),
        CheckConstraint(
            "target_sessions_per_week IS NULL OR target_sessions_per_week > 0",
            name="ck_practice_plans_sessions_positive",
        ),
        CheckConstraint(
            "target_minutes_per_week IS NULL OR target_minutes_per_week > 0",
            name="ck_practice_plans_minutes_positive",
        ),
        Index(
            "uq_practice_plans_active_per_user",
            "user_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("profiles.id"), nullable=False)
    frequency: Mapped[str] = mapped_column(String(16), nullable=False)
    target_sessions_per_week: Mapped[int | None] = mapped_column(Integer, nullable=True)
    target_minutes_per_week: Mapped[int | None] = mapped_column(Integer, nullable=True)
    grace_days: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
