from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from stillpoint.db.models.base import Base


class BreathingSession(Base):
    __tablename__ = "breathing_sessions"
    __table_args__ = (
        CheckConstraint("inhale_seconds > 0", name="ck_breathing_sessions_inhale_positive"),
        CheckConstraint("hold_seconds >= 0", name="ck_breathing_sessions_hold_non_negative"),
        CheckConstraint("exhale_seconds > 0", name="ck_breathing_sessions_exhale_positive"),
        CheckConstraint("rounds_completed >= 0", name="ck_breathing_sessions_rounds_non_negative"),
        CheckConstraint("total_duration_seconds >= 0", name="ck_breathing_sessions_duration_non_negative"),
        Index("idx_breathing_sessions_user_completed", "user_id", "completed_at"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("profiles.id"), nullable=False)
    pattern_name: Mapped[str] = mapped_column(String(120), nullable=False)
    inhale_seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    hold_seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    exhale_seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    rounds_completed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_duration_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
