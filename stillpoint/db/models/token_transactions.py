from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from stillpoint.db.models.base import Base


class TokenTransaction(Base):
    __tablename__ = "token_transactions"
    __table_args__ = (
        CheckConstraint("amount <> 0", name="ck_token_transactions_amount_non_zero"),
        CheckConstraint(
            "transaction_type IN ('purchase','spend')",
            name="ck_token_transactions_type",
        ),
        CheckConstraint(
            "(transaction_type = 'purchase' AND amount > 0) OR (transaction_type = 'spend' AND amount < 0)",
            name="ck_token_transactions_sign_matches_type",
        ),
        CheckConstraint("balance_after >= 0", name="ck_token_transactions_balance_after_non_negative"),
        CheckConstraint(
            "entity_type IS NULL OR entity_type IN ('course','meditation')",
            name="ck_token_transactions_entity_type",
        ),
        Index("idx_token_transactions_user_created", "user_id", "created_at"),
        Index("idx_token_transactions_entity", "entity_type", "entity_id"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("profiles.id"), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    transaction_type: Mapped[str] = mapped_column(String(16), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    entity_type: Mapped[str | None] = mapped_column(String(16), nullable=True)
    entity_id: Mapped[UUID | None] = mapped_column(Uuid, nullable=True)
    balance_after: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
