from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from stillpoint.db.models.goals import Goal


class GoalsRepo:
    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, goal_id: UUID) -> Goal | None:
        stmt = select(Goal).where(Goal.id == goal_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_active(session: AsyncSession, user_id: UUID) -> list[Goal]:
        stmt = (
            select(Goal)
            .where(Goal.user_id == user_id, Goal.is_active.is_(True))
            .order_by(Goal.created_at.desc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_active_for_update(session: AsyncSession, user_id: UUID) -> list[Goal]:
        stmt = (
            select(Goal)
            .where(Goal.user_id == user_id, Goal.is_active.is_(True))
            .order_by(Goal.created_at.asc(), Goal.id.asc())
            .with_for_update()
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def count_active(session: AsyncSession, user_id: UUID) -> int:
        stmt = select(func.count(Goal.id)).where(Goal.user_id == user_id, Goal.is_active.is_(True))
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def create(session: AsyncSession, *, goal: Goal) -> Goal:
        session.add(goal)
        await session.flush()
        return goal
