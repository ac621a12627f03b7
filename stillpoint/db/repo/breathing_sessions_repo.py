from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from stillpoint.db.models.breathing_sessions import BreathingSession


class BreathingSessionsRepo:
    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, session_id: UUID) -> BreathingSession | None:
        stmt = select(BreathingSession).where(BreathingSession.id == session_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(session: AsyncSession, *, breathing_session: BreathingSession) -> BreathingSession:
        session.add(breathing_session)
        await session.flush()
        return breathing_session

    @staticmethod
    async def count_completed(session: AsyncSession, user_id: UUID) -> int:
        stmt = select(func.count(BreathingSession.id)).where(
            BreathingSession.user_id == user_id,
            BreathingSession.completed_at.is_not(None),
        )
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)
