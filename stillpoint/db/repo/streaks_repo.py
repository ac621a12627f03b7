from __future__ import annotations

from datetime import date, datetime
from uuid import UUID, uuid4

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from stillpoint.db.models.streaks import Streak
from stillpoint.db.repo.dialect_insert import insert_ignoring_conflicts


class StreaksRepo:
    @staticmethod
    async def get_for_update(session: AsyncSession, *, user_id: UUID, streak_type: str) -> Streak | None:
        stmt = (
            select(Streak)
            .where(Streak.user_id == user_id, Streak.streak_type == streak_type)
            .with_for_update()
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def insert_first_activity(
        session: AsyncSession,
        *,
        user_id: UUID,
        streak_type: str,
        activity_date: date,
        now_utc: datetime,
    ) -> bool:
        stmt = (
            insert_ignoring_conflicts(session, Streak)
            .values(
                id=uuid4(),
                user_id=user_id,
                streak_type=streak_type,
                current_streak=1,
                longest_streak=1,
                last_activity_date=activity_date,
                grace_used=0,
                version=0,
                created_at=now_utc,
                updated_at=now_utc,
            )
            .on_conflict_do_nothing(index_elements=["user_id", "streak_type"])
            .returning(Streak.id)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def get_current_streak(session: AsyncSession, *, user_id: UUID, streak_type: str) -> int:
        stmt = select(Streak.current_streak).where(
            Streak.user_id == user_id,
            Streak.streak_type == streak_type,
        )
        result = await session.execute(stmt)
        return int(result.scalar_one_or_none() or 0)

    @staticmethod
    async def get_max_longest_streak(session: AsyncSession, user_id: UUID) -> int:
        stmt = select(func.coalesce(func.max(Streak.longest_streak), 0)).where(Streak.user_id == user_id)
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)
