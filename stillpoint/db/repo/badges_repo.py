from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from stillpoint.db.models.badges import Badge, UserBadge
from stillpoint.db.repo.dialect_insert import insert_ignoring_conflicts


class BadgesRepo:
    @staticmethod
    async def list_catalog(session: AsyncSession) -> list[Badge]:
        stmt = select(Badge).order_by(Badge.category.asc(), Badge.requirement_value.asc(), Badge.name.asc())
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def get_by_name(session: AsyncSession, name: str) -> Badge | None:
        stmt = select(Badge).where(Badge.name == name)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(session: AsyncSession, *, badge: Badge) -> Badge:
        session.add(badge)
        await session.flush()
        return badge

    @staticmethod
    async def list_earned_badge_ids(session: AsyncSession, user_id: UUID) -> set[UUID]:
        stmt = select(UserBadge.badge_id).where(UserBadge.user_id == user_id)
        result = await session.execute(stmt)
        return set(result.scalars().all())

    @staticmethod
    async def insert_user_badge_if_missing(
        session: AsyncSession,
        *,
        user_id: UUID,
        badge_id: UUID,
        earned_at: datetime,
    ) -> bool:
        stmt = (
            insert_ignoring_conflicts(session, UserBadge)
            .values(id=uuid4(), user_id=user_id, badge_id=badge_id, earned_at=earned_at)
            .on_conflict_do_nothing(index_elements=["user_id", "badge_id"])
            .returning(UserBadge.id)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def count_user_badges(session: AsyncSession, user_id: UUID) -> int:
        stmt = select(func.count(UserBadge.id)).where(UserBadge.user_id == user_id)
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)
