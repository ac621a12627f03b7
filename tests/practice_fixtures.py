from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID, uuid4

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from stillpoint.db.models.content import Course, CourseSession, StandaloneMeditation
from stillpoint.db.models.profiles import Profile

UTC = timezone.utc
NOW = datetime(2024, 1, 10, 12, 0, tzinfo=UTC)


async def create_profile(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    full_name: str | None = "Test Practitioner",
) -> UUID:
    user_id = uuid4()
    async with session_factory.begin() as session:
        session.add(Profile(id=user_id, email=f"{user_id.hex[:12]}@example.com", full_name=full_name))
    return user_id


async def create_course(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    teacher_id: UUID,
    title: str = "Foundations of Stillness",
    session_count: int = 3,
    token_cost: int = 20,
) -> tuple[UUID, list[UUID]]:
    async with session_factory.begin() as session:
        course = Course(
            teacher_id=teacher_id,
            title=title,
            description="A gentle introduction",
            is_published=True,
            token_cost=token_cost,
            created_at=NOW,
            updated_at=NOW,
        )
        session.add(course)
        await session.flush()

        course_sessions = [
            CourseSession(
                course_id=course.id,
                title=f"Session {index + 1}",
                duration_minutes=10,
                order_index=index,
                created_at=NOW,
            )
            for index in range(session_count)
        ]
        session.add_all(course_sessions)
        await session.flush()
        return course.id, [course_session.id for course_session in course_sessions]


async def create_meditation(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    teacher_id: UUID,
    token_cost: int = 20,
) -> UUID:
    async with session_factory.begin() as session:
        meditation = StandaloneMeditation(
            teacher_id=teacher_id,
            title="Evening Body Scan",
            description=None,
            duration_minutes=15,
            is_published=True,
            token_cost=token_cost,
            created_at=NOW,
            updated_at=NOW,
        )
        session.add(meditation)
        await session.flush()
        return meditation.id
