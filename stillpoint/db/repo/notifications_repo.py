from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from stillpoint.db.models.notifications import Notification


class NotificationsRepo:
    @staticmethod
    async def create(session: AsyncSession, *, notification: Notification) -> Notification:
        session.add(notification)
        await session.flush()
        return notification

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, notification_id: UUID) -> Notification | None:
        stmt = select(Notification).where(Notification.id == notification_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def count_unread(session: AsyncSession, user_id: UUID) -> int:
        stmt = select(func.count(Notification.id)).where(
            Notification.user_id == user_id,
            Notification.is_read.is_(False),
        )
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)
