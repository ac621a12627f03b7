from __future__ import annotations

from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from stillpoint.db.models.breathing_sessions import BreathingSession
from stillpoint.db.repo.breathing_sessions_repo import BreathingSessionsRepo
from stillpoint.practice.activity.service import ActivityService
from stillpoint.practice.activity.types import ActivityKind, ActivityResult
from stillpoint.practice.sessions.errors import SessionNotFoundError, SessionValidationError
from stillpoint.practice.sessions.types import BreathingSessionView

logger = structlog.get_logger("stillpoint.practice.sessions.breathing")


class BreathingSessionService:
    @staticmethod
    def _as_view(
        breathing_session: BreathingSession,
        *,
        idempotent_replay: bool = False,
        activity: ActivityResult | None = None,
    ) -> BreathingSessionView:
        return BreathingSessionView(
            session_id=breathing_session.id,
            pattern_name=breathing_session.pattern_name,
            rounds_completed=breathing_session.rounds_completed,
            total_duration_seconds=breathing_session.total_duration_seconds,
            completed_at=breathing_session.completed_at,
            idempotent_replay=idempotent_replay,
            activity=activity,
        )

    @staticmethod
    async def start_session(
        session: AsyncSession,
        *,
        user_id: UUID,
        pattern_name: str,
        inhale_seconds: int,
        hold_seconds: int,
        exhale_seconds: int,
        now_utc: datetime,
    ) -> BreathingSessionView:
        if not pattern_name or not pattern_name.strip():
            raise SessionValidationError("pattern_name must not be empty")
        if inhale_seconds <= 0 or exhale_seconds <= 0:
            raise SessionValidationError("inhale_seconds and exhale_seconds must be positive")
        if hold_seconds < 0:
            raise SessionValidationError("hold_seconds must not be negative")

        breathing_session = await BreathingSessionsRepo.create(
            session,
            breathing_session=BreathingSession(
                user_id=user_id,
                pattern_name=pattern_name.strip(),
                inhale_seconds=inhale_seconds,
                hold_seconds=hold_seconds,
                exhale_seconds=exhale_seconds,
                rounds_completed=0,
                total_duration_seconds=0,
                started_at=now_utc,
                completed_at=None,
                created_at=now_utc,
            ),
        )
        logger.info(
            "breathing_session_started",
            user_id=str(user_id),
            session_id=str(breathing_session.id),
            pattern_name=breathing_session.pattern_name,
        )
        return BreathingSessionService._as_view(breathing_session)

    @staticmethod
    async def complete_session(
        session: AsyncSession,
        *,
        user_id: UUID,
        session_id: UUID,
        rounds_completed: int,
        total_duration_seconds: int,
        now_utc: datetime,
    ) -> BreathingSessionView:
        if rounds_completed < 0 or total_duration_seconds < 0:
            raise SessionValidationError("rounds_completed and total_duration_seconds must not be negative")

        breathing_session = await BreathingSessionsRepo.get_by_id_for_update(session, session_id)
        if breathing_session is None or breathing_session.user_id != user_id:
            raise SessionNotFoundError
        if breathing_session.completed_at is not None:
            return BreathingSessionService._as_view(breathing_session, idempotent_replay=True)

        breathing_session.rounds_completed = rounds_completed
        breathing_session.total_duration_seconds = total_duration_seconds
        breathing_session.completed_at = now_utc
        await session.flush()

        activity = await ActivityService.record_completion(
            session,
            user_id=user_id,
            kind=ActivityKind.BREATHING,
            completed_at_utc=now_utc,
            minutes=total_duration_seconds // 60,
            now_utc=now_utc,
        )
        logger.info(
            "breathing_session_completed",
            user_id=str(user_id),
            session_id=str(breathing_session.id),
            rounds_completed=rounds_completed,
        )
        return BreathingSessionService._as_view(breathing_session, activity=activity)
