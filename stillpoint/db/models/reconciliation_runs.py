from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from stillpoint.db.models.base import Base


class ReconciliationRun(Base):
    __tablename__ = "reconciliation_runs"
    __table_args__ = (
        CheckConstraint("scope IN ('all','user')", name="ck_reconciliation_runs_scope"),
        CheckConstraint("status IN ('OK','DIFF')", name="ck_reconciliation_runs_status"),
        CheckConstraint(
            "(scope = 'user' AND user_id IS NOT NULL) OR (scope = 'all' AND user_id IS NULL)",
            name="ck_reconciliation_runs_user_matches_scope",
        ),
        Index("idx_reconciliation_runs_scope_started", "scope", "started_at"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    scope: Mapped[str] = mapped_column(String(8), nullable=False)
    user_id: Mapped[UUID | None] = mapped_column(Uuid, nullable=True)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    finished_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(String(8), nullable=False)
    accounts_checked: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    diff_count: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
