from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from stillpoint.db.models.practice_plans import PracticePlan


class PracticePlansRepo:
    @staticmethod
    async def get_active(session: AsyncSession, user_id: UUID) -> PracticePlan | None:
        stmt = select(PracticePlan).where(
            PracticePlan.user_id == user_id,
            PracticePlan.is_active.is_(True),
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, plan_id: UUID) -> PracticePlan | None:
        stmt = select(PracticePlan).where(PracticePlan.id == plan_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def deactivate_all_for_user(session: AsyncSession, *, user_id: UUID, now_utc: datetime) -> int:
        stmt = (
            update(PracticePlan)
            .where(PracticePlan.user_id == user_id, PracticePlan.is_active.is_(True))
            .values(is_active=False, updated_at=now_utc)
        )
        result = await session.execute(stmt)
        return int(result.rowcount or 0)

    @staticmethod
    async def create(session: AsyncSession, *, plan: PracticePlan) -> PracticePlan:
        session.add(plan)
        await session.flush()
        return plan
