from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

TRANSACTION_TYPE_PURCHASE = "purchase"
TRANSACTION_TYPE_SPEND = "spend"

ENTITY_TYPES = frozenset({"course", "meditation"})


@dataclass(frozen=True, slots=True)
class BalanceChanged:
    user_id: UUID
    balance: int
    delta: int
    transaction_id: UUID

    def as_payload(self) -> dict[str, object]:
        return {
            "user_id": str(self.user_id),
            "balance": self.balance,
            "delta": self.delta,
            "transaction_id": str(self.transaction_id),
        }


@dataclass(slots=True)
class TokenOperationResult:
    transaction_id: UUID
    new_balance: int
    delta: int
    event: BalanceChanged


@dataclass(slots=True)
class TokenTransactionView:
    transaction_id: UUID
    amount: int
    transaction_type: str
    description: str
    entity_type: str | None
    entity_id: UUID | None
    balance_after: int
    created_at: datetime


@dataclass(slots=True)
class AccountReconciliation:
    user_id: UUID
    stored_balance: int
    ledger_balance: int

    @property
    def diff(self) -> int:
        return self.stored_balance - self.ledger_balance

    @property
    def matches(self) -> bool:
        return self.diff == 0
