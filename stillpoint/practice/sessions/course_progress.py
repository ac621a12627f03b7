from __future__ import annotations

from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from stillpoint.db.models.content import CourseProgress
from stillpoint.db.repo.content_repo import ContentRepo
from stillpoint.practice.activity.service import ActivityService
from stillpoint.practice.activity.types import ActivityKind
from stillpoint.practice.sessions.errors import SessionNotFoundError, SessionValidationError
from stillpoint.practice.sessions.types import CourseProgressView

logger = structlog.get_logger("stillpoint.practice.sessions.course_progress")


class CourseProgressService:
    @staticmethod
    async def update_progress(
        session: AsyncSession,
        *,
        user_id: UUID,
        course_session_id: UUID,
        position_seconds: int,
        completed: bool,
        now_utc: datetime,
    ) -> CourseProgressView:
        if position_seconds < 0:
            raise SessionValidationError("position_seconds must not be negative")

        course_session = await ContentRepo.get_course_session(session, course_session_id)
        if course_session is None:
            raise SessionNotFoundError

        progress = await ContentRepo.get_progress_for_update(
            session,
            user_id=user_id,
            course_session_id=course_session_id,
        )
        if progress is None:
            progress = await ContentRepo.create_progress(
                session,
                progress=CourseProgress(
                    user_id=user_id,
                    course_session_id=course_session_id,
                    last_position_seconds=position_seconds,
                    completed_at=None,
                    created_at=now_utc,
                    updated_at=now_utc,
                ),
            )
        else:
            progress.last_position_seconds = position_seconds
            progress.updated_at = now_utc

        newly_completed = completed and progress.completed_at is None
        if not newly_completed:
            await session.flush()
            return CourseProgressView(
                course_session_id=course_session_id,
                last_position_seconds=progress.last_position_seconds,
                completed_at=progress.completed_at,
            )

        progress.completed_at = now_utc
        await session.flush()
        activity = await ActivityService.record_completion(
            session,
            user_id=user_id,
            kind=ActivityKind.COURSE,
            completed_at_utc=now_utc,
            minutes=course_session.duration_minutes,
            now_utc=now_utc,
        )
        logger.info(
            "course_session_completed",
            user_id=str(user_id),
            course_id=str(course_session.course_id),
            course_session_id=str(course_session_id),
        )
        return CourseProgressView(
            course_session_id=course_session_id,
            last_position_seconds=progress.last_position_seconds,
            completed_at=progress.completed_at,
            newly_completed=True,
            activity=activity,
        )
