from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from stillpoint.db.models.notifications import Notification
from stillpoint.db.repo.notifications_repo import NotificationsRepo
from stillpoint.practice.notifications.errors import NotificationNotFoundError

NOTIFICATION_TYPE_BADGE_EARNED = "badge_earned"


@dataclass(slots=True)
class NotificationReadResult:
    notification_id: UUID
    already_read: bool


class NotificationService:
    @staticmethod
    async def create_badge_earned(
        session: AsyncSession,
        *,
        user_id: UUID,
        badge_name: str,
        badge_description: str,
        now_utc: datetime,
    ) -> Notification:
        return await NotificationsRepo.create(
            session,
            notification=Notification(
                user_id=user_id,
                notification_type=NOTIFICATION_TYPE_BADGE_EARNED,
                title=f'Badge earned: "{badge_name}"',
                message=badge_description,
                is_read=False,
                read_at=None,
                created_at=now_utc,
            ),
        )

    @staticmethod
    async def mark_read(
        session: AsyncSession,
        *,
        user_id: UUID,
        notification_id: UUID,
        now_utc: datetime,
    ) -> NotificationReadResult:
        notification = await NotificationsRepo.get_by_id_for_update(session, notification_id)
        if notification is None or notification.user_id != user_id:
            raise NotificationNotFoundError
        if notification.is_read:
            return NotificationReadResult(notification_id=notification.id, already_read=True)

        notification.is_read = True
        notification.read_at = now_utc
        await session.flush()
        return NotificationReadResult(notification_id=notification.id, already_read=False)
