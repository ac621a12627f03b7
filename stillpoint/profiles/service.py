from __future__ import annotations

from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from stillpoint.db.repo.profiles_repo import ProfilesRepo
from stillpoint.profiles.errors import UserNotFoundError

logger = structlog.get_logger("stillpoint.profiles")


class ProfileService:
    @staticmethod
    async def require_profile(session: AsyncSession, user_id: UUID) -> None:
        """Every user-owned row references profiles.id, so writes need an existing profile."""
        if await ProfilesRepo.exists(session, user_id):
            return

        logger.info("profile_missing", user_id=str(user_id))
        raise UserNotFoundError
