from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stillpoint.db.models.profiles import Profile


class ProfilesRepo:
    @staticmethod
    async def exists(session: AsyncSession, user_id: UUID) -> bool:
        stmt = select(Profile.id).where(Profile.id == user_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None
