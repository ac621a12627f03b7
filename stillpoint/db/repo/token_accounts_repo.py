from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stillpoint.db.models.user_tokens import TokenAccount
from stillpoint.db.repo.dialect_insert import insert_ignoring_conflicts


class TokenAccountsRepo:
    @staticmethod
    async def get_by_user_id_for_update(session: AsyncSession, user_id: UUID) -> TokenAccount | None:
        stmt = select(TokenAccount).where(TokenAccount.user_id == user_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create_if_missing(session: AsyncSession, *, user_id: UUID, now_utc: datetime) -> None:
        stmt = (
            insert_ignoring_conflicts(session, TokenAccount)
            .values(
                id=uuid4(),
                user_id=user_id,
                balance=0,
                version=0,
                created_at=now_utc,
                updated_at=now_utc,
            )
            .on_conflict_do_nothing(index_elements=["user_id"])
        )
        await session.execute(stmt)

    @staticmethod
    async def get_balance(session: AsyncSession, user_id: UUID) -> int:
        stmt = select(TokenAccount.balance).where(TokenAccount.user_id == user_id)
        result = await session.execute(stmt)
        return int(result.scalar_one_or_none() or 0)

    @staticmethod
    async def list_page(
        session: AsyncSession,
        *,
        after_user_id: UUID | None,
        limit: int,
    ) -> list[TokenAccount]:
        stmt = select(TokenAccount).order_by(TokenAccount.user_id.asc()).limit(limit)
        if after_user_id is not None:
            stmt = stmt.where(TokenAccount.user_id > after_user_id)
        result = await session.execute(stmt)
        return list(result.scalars().all())
