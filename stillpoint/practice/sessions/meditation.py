from __future__ import annotations

from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from stillpoint.core.time import as_utc
from stillpoint.db.models.meditation_sessions import MeditationSession
from stillpoint.db.repo.meditation_sessions_repo import MeditationSessionsRepo
from stillpoint.practice.activity.service import ActivityService
from stillpoint.practice.activity.types import ActivityKind, ActivityResult
from stillpoint.practice.sessions.errors import SessionNotFoundError, SessionValidationError
from stillpoint.practice.sessions.rules import ensure_transition, is_idempotent_repeat, is_terminal, parse_status
from stillpoint.practice.sessions.types import MeditationSessionView, SessionStatus

logger = structlog.get_logger("stillpoint.practice.sessions.meditation")


def _validate_new_session(*, session_type: str, duration_minutes: int, interval_minutes: int | None) -> None:
    if not session_type or not session_type.strip():
        raise SessionValidationError("session_type must not be empty")
    if duration_minutes <= 0:
        raise SessionValidationError("duration_minutes must be positive")
    if interval_minutes is not None and interval_minutes <= 0:
        raise SessionValidationError("interval_minutes must be positive")


def _validate_total_minutes(total_minutes: int | None) -> None:
    if total_minutes is not None and total_minutes < 0:
        raise SessionValidationError("total_minutes must not be negative")


class MeditationSessionService:
    @staticmethod
    def _as_view(
        meditation_session: MeditationSession,
        *,
        idempotent_replay: bool = False,
        activity: ActivityResult | None = None,
    ) -> MeditationSessionView:
        return MeditationSessionView(
            session_id=meditation_session.id,
            status=SessionStatus(meditation_session.status),
            duration_minutes=meditation_session.duration_minutes,
            total_minutes_meditated=meditation_session.total_minutes_meditated,
            started_at=meditation_session.started_at,
            completed_at=meditation_session.completed_at,
            idempotent_replay=idempotent_replay,
            activity=activity,
        )

    @staticmethod
    async def _get_owned_for_update(
        session: AsyncSession,
        *,
        user_id: UUID,
        session_id: UUID,
    ) -> MeditationSession:
        meditation_session = await MeditationSessionsRepo.get_by_id_for_update(session, session_id)
        if meditation_session is None or meditation_session.user_id != user_id:
            raise SessionNotFoundError
        return meditation_session

    @staticmethod
    async def _get_by_start_for_update(
        session: AsyncSession,
        *,
        user_id: UUID,
        started_at: datetime,
    ) -> MeditationSession:
        meditation_session = await MeditationSessionsRepo.get_by_user_started_for_update(
            session,
            user_id=user_id,
            started_at=started_at,
        )
        if meditation_session is None:
            raise SessionNotFoundError
        return meditation_session

    @staticmethod
    async def _move_to(
        session: AsyncSession,
        *,
        meditation_session: MeditationSession,
        target: SessionStatus,
        now_utc: datetime,
        completed_at: datetime | None = None,
        total_minutes: int | None = None,
    ) -> MeditationSessionView:
        current = SessionStatus(meditation_session.status)
        if is_idempotent_repeat(current, target):
            return MeditationSessionService._as_view(meditation_session, idempotent_replay=True)
        ensure_transition(current, target)

        meditation_session.status = target.value
        meditation_session.updated_at = now_utc
        if target == SessionStatus.PAUSED:
            meditation_session.paused_at = now_utc
        elif target == SessionStatus.IN_PROGRESS:
            meditation_session.resumed_at = now_utc
        elif target == SessionStatus.ABANDONED:
            meditation_session.abandoned_at = now_utc
            if total_minutes is not None:
                meditation_session.total_minutes_meditated = total_minutes

        activity: ActivityResult | None = None
        if target == SessionStatus.COMPLETED:
            finished_at = completed_at or now_utc
            minutes = meditation_session.duration_minutes if total_minutes is None else total_minutes
            meditation_session.completed_at = finished_at
            meditation_session.total_minutes_meditated = minutes
            await session.flush()
            activity = await ActivityService.record_completion(
                session,
                user_id=meditation_session.user_id,
                kind=ActivityKind.MEDITATION,
                completed_at_utc=finished_at,
                minutes=minutes,
                now_utc=now_utc,
            )
        else:
            await session.flush()

        logger.info(
            "meditation_session_transitioned",
            user_id=str(meditation_session.user_id),
            session_id=str(meditation_session.id),
            from_status=current.value,
            to_status=target.value,
        )
        return MeditationSessionService._as_view(meditation_session, activity=activity)

    @staticmethod
    async def start_session(
        session: AsyncSession,
        *,
        user_id: UUID,
        session_type: str,
        duration_minutes: int,
        now_utc: datetime,
        interval_minutes: int | None = None,
        started_at: datetime | None = None,
    ) -> MeditationSessionView:
        _validate_new_session(
            session_type=session_type,
            duration_minutes=duration_minutes,
            interval_minutes=interval_minutes,
        )
        started = as_utc(started_at) if started_at is not None else now_utc

        created = await MeditationSessionsRepo.insert_if_missing(
            session,
            user_id=user_id,
            session_type=session_type.strip(),
            duration_minutes=duration_minutes,
            interval_minutes=interval_minutes,
            status=SessionStatus.IN_PROGRESS.value,
            started_at=started,
            now_utc=now_utc,
        )
        meditation_session = await MeditationSessionService._get_by_start_for_update(
            session, user_id=user_id, started_at=started
        )
        if not created:
            return MeditationSessionService._as_view(meditation_session, idempotent_replay=True)

        logger.info(
            "meditation_session_started",
            user_id=str(user_id),
            session_id=str(meditation_session.id),
            session_type=meditation_session.session_type,
            duration_minutes=duration_minutes,
        )
        return MeditationSessionService._as_view(meditation_session)

    @staticmethod
    async def pause_session(
        session: AsyncSession,
        *,
        user_id: UUID,
        session_id: UUID,
        now_utc: datetime,
    ) -> MeditationSessionView:
        meditation_session = await MeditationSessionService._get_owned_for_update(
            session, user_id=user_id, session_id=session_id
        )
        return await MeditationSessionService._move_to(
            session,
            meditation_session=meditation_session,
            target=SessionStatus.PAUSED,
            now_utc=now_utc,
        )

    @staticmethod
    async def resume_session(
        session: AsyncSession,
        *,
        user_id: UUID,
        session_id: UUID,
        now_utc: datetime,
    ) -> MeditationSessionView:
        meditation_session = await MeditationSessionService._get_owned_for_update(
            session, user_id=user_id, session_id=session_id
        )
        return await MeditationSessionService._move_to(
            session,
            meditation_session=meditation_session,
            target=SessionStatus.IN_PROGRESS,
            now_utc=now_utc,
        )

    @staticmethod
    async def complete_session(
        session: AsyncSession,
        *,
        user_id: UUID,
        session_id: UUID,
        now_utc: datetime,
        total_minutes: int | None = None,
    ) -> MeditationSessionView:
        _validate_total_minutes(total_minutes)
        meditation_session = await MeditationSessionService._get_owned_for_update(
            session, user_id=user_id, session_id=session_id
        )
        return await MeditationSessionService._move_to(
            session,
            meditation_session=meditation_session,
            target=SessionStatus.COMPLETED,
            now_utc=now_utc,
            total_minutes=total_minutes,
        )

    @staticmethod
    async def abandon_session(
        session: AsyncSession,
        *,
        user_id: UUID,
        session_id: UUID,
        now_utc: datetime,
        total_minutes: int | None = None,
    ) -> MeditationSessionView:
        _validate_total_minutes(total_minutes)
        meditation_session = await MeditationSessionService._get_owned_for_update(
            session, user_id=user_id, session_id=session_id
        )
        return await MeditationSessionService._move_to(
            session,
            meditation_session=meditation_session,
            target=SessionStatus.ABANDONED,
            now_utc=now_utc,
            total_minutes=total_minutes,
        )

    @staticmethod
    async def sync_session(
        session: AsyncSession,
        *,
        user_id: UUID,
        session_type: str,
        duration_minutes: int,
        status: str,
        started_at: datetime,
        now_utc: datetime,
        completed_at: datetime | None = None,
        total_minutes: int | None = None,
    ) -> MeditationSessionView:
        """Upserts a session recorded by an offline client, keyed by (user, started_at)."""
        _validate_new_session(
            session_type=session_type,
            duration_minutes=duration_minutes,
            interval_minutes=None,
        )
        _validate_total_minutes(total_minutes)
        target = parse_status(status)
        started = as_utc(started_at)
        finished = as_utc(completed_at) if completed_at is not None else None

        created = await MeditationSessionsRepo.insert_if_missing(
            session,
            user_id=user_id,
            session_type=session_type.strip(),
            duration_minutes=duration_minutes,
            interval_minutes=None,
            status=SessionStatus.IN_PROGRESS.value,
            started_at=started,
            now_utc=now_utc,
        )
        meditation_session = await MeditationSessionService._get_by_start_for_update(
            session, user_id=user_id, started_at=started
        )
        if created:
            logger.info(
                "meditation_session_synced",
                user_id=str(user_id),
                session_id=str(meditation_session.id),
                status=target.value,
            )
            if target == SessionStatus.IN_PROGRESS:
                return MeditationSessionService._as_view(meditation_session)
        elif is_terminal(SessionStatus(meditation_session.status)):
            return MeditationSessionService._as_view(meditation_session, idempotent_replay=True)

        return await MeditationSessionService._move_to(
            session,
            meditation_session=meditation_session,
            target=target,
            now_utc=now_utc,
            completed_at=finished,
            total_minutes=total_minutes,
        )
