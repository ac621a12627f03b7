from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from stillpoint.db.models.content import (
    Course,
    CourseEnrollment,
    CourseProgress,
    CourseSession,
    StandaloneMeditation,
)
from stillpoint.db.models.profiles import Profile
from stillpoint.db.models.user_purchases import UserPurchase
from stillpoint.db.repo.dialect_insert import insert_ignoring_conflicts


@dataclass(frozen=True, slots=True)
class EnrolledCourseRow:
    course_id: UUID
    course_title: str
    course_description: str | None
    teacher_name: str | None
    total_sessions: int
    completed_sessions: int


@dataclass(frozen=True, slots=True)
class CatalogCourseRow:
    course_id: UUID
    title: str
    description: str | None
    teacher_name: str | None
    token_cost: int
    session_count: int
    created_at: datetime
    purchased: bool


class ContentRepo:
    @staticmethod
    async def get_course(session: AsyncSession, course_id: UUID) -> Course | None:
        return await session.get(Course, course_id)

    @staticmethod
    async def get_meditation(session: AsyncSession, meditation_id: UUID) -> StandaloneMeditation | None:
        return await session.get(StandaloneMeditation, meditation_id)

    @staticmethod
    async def get_course_session(session: AsyncSession, course_session_id: UUID) -> CourseSession | None:
        return await session.get(CourseSession, course_session_id)

    @staticmethod
    async def enroll_if_missing(
        session: AsyncSession,
        *,
        user_id: UUID,
        course_id: UUID,
        now_utc: datetime,
    ) -> bool:
        stmt = (
            insert_ignoring_conflicts(session, CourseEnrollment)
            .values(id=uuid4(), user_id=user_id, course_id=course_id, enrolled_at=now_utc)
            .on_conflict_do_nothing(index_elements=["user_id", "course_id"])
            .returning(CourseEnrollment.id)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def count_enrollments(session: AsyncSession, user_id: UUID) -> int:
        stmt = select(func.count(CourseEnrollment.id)).where(CourseEnrollment.user_id == user_id)
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def get_progress_for_update(
        session: AsyncSession,
        *,
        user_id: UUID,
        course_session_id: UUID,
    ) -> CourseProgress | None:
        stmt = (
            select(CourseProgress)
            .where(
                CourseProgress.user_id == user_id,
                CourseProgress.course_session_id == course_session_id,
            )
            .with_for_update()
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create_progress(session: AsyncSession, *, progress: CourseProgress) -> CourseProgress:
        session.add(progress)
        await session.flush()
        return progress

    @staticmethod
    async def count_completed_course_sessions(session: AsyncSession, user_id: UUID) -> int:
        stmt = select(func.count(CourseProgress.id)).where(
            CourseProgress.user_id == user_id,
            CourseProgress.completed_at.is_not(None),
        )
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def list_enrolled_courses_with_progress(
        session: AsyncSession,
        user_id: UUID,
    ) -> list[EnrolledCourseRow]:
        total_sessions = (
            select(CourseSession.course_id, func.count(CourseSession.id).label("total"))
            .group_by(CourseSession.course_id)
            .subquery()
        )
        completed_sessions = (
            select(CourseSession.course_id, func.count(CourseProgress.id).label("completed"))
            .join(CourseProgress, CourseProgress.course_session_id == CourseSession.id)
            .where(
                and_(
                    CourseProgress.user_id == user_id,
                    CourseProgress.completed_at.is_not(None),
                )
            )
            .group_by(CourseSession.course_id)
            .subquery()
        )
        stmt = (
            select(
                Course.id,
                Course.title,
                Course.description,
                Profile.full_name,
                func.coalesce(total_sessions.c.total, 0),
                func.coalesce(completed_sessions.c.completed, 0),
            )
            .join(CourseEnrollment, CourseEnrollment.course_id == Course.id)
            .outerjoin(Profile, Profile.id == Course.teacher_id)
            .outerjoin(total_sessions, total_sessions.c.course_id == Course.id)
            .outerjoin(completed_sessions, completed_sessions.c.course_id == Course.id)
            .where(CourseEnrollment.user_id == user_id)
            .order_by(CourseEnrollment.enrolled_at.desc())
        )
        result = await session.execute(stmt)
        return [
            EnrolledCourseRow(
                course_id=course_id,
                course_title=title,
                course_description=description,
                teacher_name=teacher_name,
                total_sessions=int(total or 0),
                completed_sessions=int(completed or 0),
            )
            for course_id, title, description, teacher_name, total, completed in result.all()
        ]

    @staticmethod
    async def list_published_courses(
        session: AsyncSession,
        *,
        user_id: UUID,
        limit: int,
        offset: int,
    ) -> list[CatalogCourseRow]:
        session_counts = (
            select(CourseSession.course_id, func.count(CourseSession.id).label("total"))
            .group_by(CourseSession.course_id)
            .subquery()
        )
        purchased_course_ids = select(UserPurchase.entity_id).where(
            UserPurchase.user_id == user_id,
            UserPurchase.entity_type == "course",
        )
        stmt = (
            select(
                Course.id,
                Course.title,
                Course.description,
                Profile.full_name,
                Course.token_cost,
                func.coalesce(session_counts.c.total, 0),
                Course.created_at,
                Course.id.in_(purchased_course_ids),
            )
            .outerjoin(Profile, Profile.id == Course.teacher_id)
            .outerjoin(session_counts, session_counts.c.course_id == Course.id)
            .where(Course.is_published.is_(True))
            .order_by(Course.created_at.desc(), Course.id)
            .limit(limit)
            .offset(offset)
        )
        result = await session.execute(stmt)
        return [
            CatalogCourseRow(
                course_id=course_id,
                title=title,
                description=description,
                teacher_name=teacher_name,
                token_cost=token_cost,
                session_count=int(total or 0),
                created_at=created_at,
                purchased=bool(purchased),
            )
            for course_id, title, description, teacher_name, token_cost, total, created_at, purchased in result.all()
        ]
