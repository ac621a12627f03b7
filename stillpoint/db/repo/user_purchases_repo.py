from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from stillpoint.db.models.user_purchases import UserPurchase
from stillpoint.db.repo.dialect_insert import insert_ignoring_conflicts


class UserPurchasesRepo:
    @staticmethod
    async def get_for_entity(
        session: AsyncSession,
        *,
        user_id: UUID,
        entity_type: str,
        entity_id: UUID,
    ) -> UserPurchase | None:
        stmt = select(UserPurchase).where(
            UserPurchase.user_id == user_id,
            UserPurchase.entity_type == entity_type,
            UserPurchase.entity_id == entity_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def claim(
        session: AsyncSession,
        *,
        user_id: UUID,
        entity_type: str,
        entity_id: UUID,
        token_cost: int,
        purchased_at: datetime,
    ) -> UUID | None:
        """Inserts the purchase row unless the user already owns the entity; returns the new row id."""
        stmt = (
            insert_ignoring_conflicts(session, UserPurchase)
            .values(
                id=uuid4(),
                user_id=user_id,
                entity_type=entity_type,
                entity_id=entity_id,
                token_cost=token_cost,
                transaction_id=None,
                purchased_at=purchased_at,
            )
            .on_conflict_do_nothing(index_elements=["user_id", "entity_type", "entity_id"])
            .returning(UserPurchase.id)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def attach_transaction(session: AsyncSession, *, purchase_id: UUID, transaction_id: UUID) -> None:
        stmt = update(UserPurchase).where(UserPurchase.id == purchase_id).values(transaction_id=transaction_id)
        await session.execute(stmt)

    @staticmethod
    async def list_for_user(session: AsyncSession, user_id: UUID) -> list[UserPurchase]:
        stmt = (
            select(UserPurchase)
            .where(UserPurchase.user_id == user_id)
            .order_by(UserPurchase.purchased_at.desc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
