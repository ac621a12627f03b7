from __future__ import annotations

from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from stillpoint.core.config import get_settings
from stillpoint.db.models.token_transactions import TokenTransaction
from stillpoint.db.models.user_tokens import TokenAccount
from stillpoint.db.repo.outbox_events_repo import OutboxEventsRepo
from stillpoint.db.repo.token_accounts_repo import TokenAccountsRepo
from stillpoint.db.repo.token_transactions_repo import TokenTransactionsRepo
from stillpoint.economy.tokens.errors import (
    InsufficientTokensError,
    InvalidTokenAmountError,
    TokenValidationError,
)
from stillpoint.economy.tokens.types import (
    ENTITY_TYPES,
    TRANSACTION_TYPE_PURCHASE,
    TRANSACTION_TYPE_SPEND,
    BalanceChanged,
    TokenOperationResult,
    TokenTransactionView,
)

logger = structlog.get_logger("stillpoint.economy.tokens")

OUTBOX_EVENT_BALANCE_CHANGED = "token_balance_changed"
MAX_TRANSACTIONS_PAGE = 200


class TokenLedgerService:
    @staticmethod
    async def _get_or_create_account_for_update(
        session: AsyncSession,
        user_id: UUID,
        now_utc: datetime,
    ) -> TokenAccount:
        account = await TokenAccountsRepo.get_by_user_id_for_update(session, user_id)
        if account is not None:
            return account

        await TokenAccountsRepo.create_if_missing(session, user_id=user_id, now_utc=now_utc)
        account = await TokenAccountsRepo.get_by_user_id_for_update(session, user_id)
        if account is None:
            raise RuntimeError("token account missing after conflict-ignoring insert")
        return account

    @staticmethod
    async def _record_movement(
        session: AsyncSession,
        *,
        account: TokenAccount,
        amount: int,
        transaction_type: str,
        description: str,
        now_utc: datetime,
        entity_type: str | None = None,
        entity_id: UUID | None = None,
    ) -> TokenOperationResult:
        new_balance = account.balance + amount
        transaction = await TokenTransactionsRepo.create(
            session,
            transaction=TokenTransaction(
                user_id=account.user_id,
                amount=amount,
                transaction_type=transaction_type,
                description=description,
                entity_type=entity_type,
                entity_id=entity_id,
                balance_after=new_balance,
                created_at=now_utc,
            ),
        )
        account.balance = new_balance
        account.version += 1
        account.updated_at = now_utc

        event = BalanceChanged(
            user_id=account.user_id,
            balance=new_balance,
            delta=amount,
            transaction_id=transaction.id,
        )
        await OutboxEventsRepo.enqueue(
            session,
            event_type=OUTBOX_EVENT_BALANCE_CHANGED,
            payload=event.as_payload(),
            created_at=now_utc,
        )

        return TokenOperationResult(
            transaction_id=transaction.id,
            new_balance=new_balance,
            delta=amount,
            event=event,
        )

    @staticmethod
    async def purchase_tokens(
        session: AsyncSession,
        *,
        user_id: UUID,
        amount: int,
        payment_method: str,
        now_utc: datetime,
    ) -> TokenOperationResult:
        """Credits tokens for a demo purchase; no external charge is made."""
        max_amount = get_settings().token_purchase_max_amount
        if amount <= 0:
            raise InvalidTokenAmountError("amount must be positive")
        if amount > max_amount:
            raise InvalidTokenAmountError(f"amount must be at most {max_amount}")
        if not payment_method or not payment_method.strip():
            raise TokenValidationError("payment_method must not be empty")

        account = await TokenLedgerService._get_or_create_account_for_update(session, user_id, now_utc)
        result = await TokenLedgerService._record_movement(
            session,
            account=account,
            amount=amount,
            transaction_type=TRANSACTION_TYPE_PURCHASE,
            description=f"Purchased {amount} tokens via {payment_method.strip()}",
            now_utc=now_utc,
        )
        logger.info(
            "token_purchase_recorded",
            user_id=str(user_id),
            amount=amount,
            payment_method=payment_method.strip(),
            new_balance=result.new_balance,
        )
        return result

    @staticmethod
    async def spend_tokens(
        session: AsyncSession,
        *,
        user_id: UUID,
        amount: int,
        description: str,
        now_utc: datetime,
        entity_type: str | None = None,
        entity_id: UUID | None = None,
    ) -> TokenOperationResult:
        if amount <= 0:
            raise InvalidTokenAmountError("amount must be positive")
        if not description or not description.strip():
            raise TokenValidationError("description must not be empty")
        if entity_type is not None and entity_type not in ENTITY_TYPES:
            raise TokenValidationError(f"entity_type must be one of {sorted(ENTITY_TYPES)}")

        account = await TokenAccountsRepo.get_by_user_id_for_update(session, user_id)
        current_balance = account.balance if account is not None else 0
        if account is None or current_balance < amount:
            logger.info(
                "token_spend_rejected",
                user_id=str(user_id),
                amount=amount,
                current_balance=current_balance,
            )
            raise InsufficientTokensError(current_balance=current_balance, required=amount)

        result = await TokenLedgerService._record_movement(
            session,
            account=account,
            amount=-amount,
            transaction_type=TRANSACTION_TYPE_SPEND,
            description=description.strip(),
            now_utc=now_utc,
            entity_type=entity_type,
            entity_id=entity_id,
        )
        logger.info(
            "token_spend_recorded",
            user_id=str(user_id),
            amount=amount,
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            new_balance=result.new_balance,
        )
        return result

    @staticmethod
    async def get_balance(session: AsyncSession, user_id: UUID) -> int:
        return await TokenAccountsRepo.get_balance(session, user_id)

    @staticmethod
    async def list_transactions(
        session: AsyncSession,
        *,
        user_id: UUID,
        limit: int = 50,
    ) -> list[TokenTransactionView]:
        if limit <= 0 or limit > MAX_TRANSACTIONS_PAGE:
            raise TokenValidationError(f"limit must be between 1 and {MAX_TRANSACTIONS_PAGE}")

        transactions = await TokenTransactionsRepo.list_for_user(session, user_id=user_id, limit=limit)
        return [
            TokenTransactionView(
                transaction_id=transaction.id,
                amount=transaction.amount,
                transaction_type=transaction.transaction_type,
                description=transaction.description,
                entity_type=transaction.entity_type,
                entity_id=transaction.entity_id,
                balance_after=transaction.balance_after,
                created_at=transaction.created_at,
            )
            for transaction in transactions
        ]
