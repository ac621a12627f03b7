from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from stillpoint.db.models.base import Base


class MeditationSession(Base):
    __tablename__ = "meditation_sessions"
    __table_args__ = (
        UniqueConstraint("user_id", "started_at", name="uq_meditation_sessions_user_started"),
        CheckConstraint(
            "status IN ('in_progress','paused','completed','abandoned')",
            name="ck_meditation_sessions_status",
        ),
        CheckConstraint("duration_minutes > 0", name="ck_meditation_sessions_duration_positive"),
        CheckConstraint(
            "total_minutes_meditated IS NULL OR total_minutes_meditated >= 0",
            name="ck_meditation_sessions_total_minutes_non_negative",
        ),
        Index("idx_meditation_sessions_user_status", "user_id", "status"),
        Index("idx_meditation_sessions_user_completed", "user_id", "completed_at"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("profiles.id"), nullable=False)
    session_type: Mapped[str] = mapped_column(String(32), nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    interval_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    paused_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    resumed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    abandoned_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    total_minutes_meditated: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
