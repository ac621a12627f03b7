from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from stillpoint.db.models.token_transactions import TokenTransaction


class TokenTransactionsRepo:
    @staticmethod
    async def create(session: AsyncSession, *, transaction: TokenTransaction) -> TokenTransaction:
        session.add(transaction)
        await session.flush()
        return transaction

    @staticmethod
    async def sum_for_user(session: AsyncSession, user_id: UUID) -> int:
        stmt = select(func.coalesce(func.sum(TokenTransaction.amount), 0)).where(
            TokenTransaction.user_id == user_id
        )
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def sum_by_users(session: AsyncSession, user_ids: Iterable[UUID]) -> dict[UUID, int]:
        resolved_ids = list(user_ids)
        if not resolved_ids:
            return {}
        stmt = (
            select(TokenTransaction.user_id, func.coalesce(func.sum(TokenTransaction.amount), 0))
            .where(TokenTransaction.user_id.in_(resolved_ids))
            .group_by(TokenTransaction.user_id)
        )
        result = await session.execute(stmt)
        return {user_id: int(total or 0) for user_id, total in result.all()}

    @staticmethod
    async def list_for_user(
        session: AsyncSession,
        *,
        user_id: UUID,
        limit: int,
    ) -> list[TokenTransaction]:
        stmt = (
            select(TokenTransaction)
            .where(TokenTransaction.user_id == user_id)
            .order_by(TokenTransaction.created_at.desc(), TokenTransaction.id.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
