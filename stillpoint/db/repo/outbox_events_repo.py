from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stillpoint.db.models.outbox_events import OutboxEvent

OUTBOX_STATUS_NEW = "NEW"


class OutboxEventsRepo:
    @staticmethod
    async def enqueue(
        session: AsyncSession,
        *,
        event_type: str,
        payload: dict[str, object],
        created_at: datetime,
    ) -> OutboxEvent:
        """Adds an undelivered event to the caller's transaction; it becomes visible on commit."""
        event = OutboxEvent(event_type=event_type, payload=payload, status=OUTBOX_STATUS_NEW, created_at=created_at)
        session.add(event)
        await session.flush()
        return event

    @staticmethod
    async def list_by_type(
        session: AsyncSession,
        *,
        event_type: str,
        limit: int,
    ) -> list[OutboxEvent]:
        stmt = (
            select(OutboxEvent)
            .where(OutboxEvent.event_type == event_type)
            .order_by(OutboxEvent.created_at.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
