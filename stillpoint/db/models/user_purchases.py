from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from stillpoint.db.models.base import Base


class UserPurchase(Base):
    __tablename__ = "user_purchases"
    __table_args__ = (
        UniqueConstraint("user_id", "entity_type", "entity_id", name="uq_user_purchases_user_entity"),
        CheckConstraint("entity_type IN ('course','meditation')", name="ck_user_purchases_entity_type"),
        CheckConstraint("token_cost >= 0", name="ck_user_purchases_token_cost_non_negative"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("profiles.id"), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(16), nullable=False)
    entity_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    token_cost: Mapped[int] = mapped_column(Integer, nullable=False)
    transaction_id: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("token_transactions.id"),
        nullable=True,
    )
    purchased_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
