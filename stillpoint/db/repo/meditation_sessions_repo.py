from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from stillpoint.db.models.meditation_sessions import MeditationSession
from stillpoint.db.repo.dialect_insert import insert_ignoring_conflicts


class MeditationSessionsRepo:
    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, session_id: UUID) -> MeditationSession | None:
        stmt = select(MeditationSession).where(MeditationSession.id == session_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_user_started_for_update(
        session: AsyncSession,
        *,
        user_id: UUID,
        started_at: datetime,
    ) -> MeditationSession | None:
        stmt = (
            select(MeditationSession)
            .where(MeditationSession.user_id == user_id, MeditationSession.started_at == started_at)
            .with_for_update()
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def insert_if_missing(
        session: AsyncSession,
        *,
        user_id: UUID,
        session_type: str,
        duration_minutes: int,
        interval_minutes: int | None,
        status: str,
        started_at: datetime,
        now_utc: datetime,
    ) -> bool:
        """Returns False when the user already has a session starting at started_at."""
        stmt = (
            insert_ignoring_conflicts(session, MeditationSession)
            .values(
                id=uuid4(),
                user_id=user_id,
                session_type=session_type,
                duration_minutes=duration_minutes,
                interval_minutes=interval_minutes,
                status=status,
                started_at=started_at,
                created_at=now_utc,
                updated_at=now_utc,
            )
            .on_conflict_do_nothing(index_elements=["user_id", "started_at"])
            .returning(MeditationSession.id)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def count_completed(
        session: AsyncSession,
        *,
        user_id: UUID,
        since_utc: datetime | None = None,
        until_utc: datetime | None = None,
    ) -> int:
        stmt = select(func.count(MeditationSession.id)).where(
            MeditationSession.user_id == user_id,
            MeditationSession.status == "completed",
        )
        if since_utc is not None:
            stmt = stmt.where(MeditationSession.completed_at >= since_utc)
        if until_utc is not None:
            stmt = stmt.where(MeditationSession.completed_at < until_utc)
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def sum_completed_minutes(
        session: AsyncSession,
        *,
        user_id: UUID,
        since_utc: datetime | None = None,
    ) -> int:
        stmt = select(
            func.coalesce(func.sum(func.coalesce(MeditationSession.total_minutes_meditated, 0)), 0)
        ).where(
            MeditationSession.user_id == user_id,
            MeditationSession.status == "completed",
        )
        if since_utc is not None:
            stmt = stmt.where(MeditationSession.completed_at >= since_utc)
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)
