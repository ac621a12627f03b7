from __future__ import annotations

from uuid import uuid4

import pytest

from stillpoint.practice.sessions.breathing import BreathingSessionService
from stillpoint.practice.sessions.course_progress import CourseProgressService
from stillpoint.practice.sessions.errors import SessionNotFoundError, SessionValidationError
from stillpoint.stats.service import StatsService
from tests.practice_fixtures import NOW, create_course, create_profile


@pytest.mark.asyncio
async def test_breathing_completion_counts_once(session_factory) -> None:
    user_id = await create_profile(session_factory)
    async with session_factory.begin() as session:
        started = await BreathingSessionService.start_session(
            session,
            user_id=user_id,
            pattern_name="Box Breathing",
            inhale_seconds=4,
            hold_seconds=4,
            exhale_seconds=4,
            now_utc=NOW,
        )

    async with session_factory.begin() as session:
        completed = await BreathingSessionService.complete_session(
            session,
            user_id=user_id,
            session_id=started.session_id,
            rounds_completed=10,
            total_duration_seconds=160,
            now_utc=NOW,
        )
    async with session_factory.begin() as session:
        repeated = await BreathingSessionService.complete_session(
            session,
            user_id=user_id,
            session_id=started.session_id,
            rounds_completed=12,
            total_duration_seconds=200,
            now_utc=NOW,
        )

    assert completed.activity is not None
    assert [streak.streak_type for streak in completed.activity.streaks] == ["breathing", "overall"]
    assert repeated.idempotent_replay is True
    assert repeated.rounds_completed == 10

    async with session_factory() as session:
        stats = await StatsService.get_progress_stats(session, user_id=user_id, now_utc=NOW)
        summary = await StatsService.get_dashboard_summary(session, user_id=user_id)
    assert stats.breathing_sessions == 1
    assert summary.total_sessions == 0
    assert summary.current_streak == 1


@pytest.mark.asyncio
async def test_breathing_start_rejects_bad_pattern(session_factory) -> None:
    user_id = await create_profile(session_factory)

    with pytest.raises(SessionValidationError):
        async with session_factory.begin() as session:
            await BreathingSessionService.start_session(
                session,
                user_id=user_id,
                pattern_name="4-7-8",
                inhale_seconds=0,
                hold_seconds=7,
                exhale_seconds=8,
                now_utc=NOW,
            )


@pytest.mark.asyncio
async def test_course_progress_completion_records_activity_once(session_factory) -> None:
    user_id = await create_profile(session_factory)
    teacher_id = await create_profile(session_factory, full_name="Ada Calm")
    _, course_session_ids = await create_course(session_factory, teacher_id=teacher_id)
    course_session_id = course_session_ids[0]

    async with session_factory.begin() as session:
        partial = await CourseProgressService.update_progress(
            session,
            user_id=user_id,
            course_session_id=course_session_id,
            position_seconds=120,
            completed=False,
            now_utc=NOW,
        )
    async with session_factory.begin() as session:
        finished = await CourseProgressService.update_progress(
            session,
            user_id=user_id,
            course_session_id=course_session_id,
            position_seconds=600,
            completed=True,
            now_utc=NOW,
        )
    async with session_factory.begin() as session:
        again = await CourseProgressService.update_progress(
            session,
            user_id=user_id,
            course_session_id=course_session_id,
            position_seconds=30,
            completed=True,
            now_utc=NOW,
        )

    assert partial.completed_at is None
    assert partial.last_position_seconds == 120
    assert finished.newly_completed is True
    assert finished.activity is not None
    assert [streak.streak_type for streak in finished.activity.streaks] == ["course", "overall"]
    assert again.newly_completed is False
    assert again.last_position_seconds == 30
    assert again.completed_at is not None


@pytest.mark.asyncio
async def test_course_progress_validates_input(session_factory) -> None:
    user_id = await create_profile(session_factory)

    with pytest.raises(SessionNotFoundError):
        async with session_factory.begin() as session:
            await CourseProgressService.update_progress(
                session,
                user_id=user_id,
                course_session_id=uuid4(),
                position_seconds=10,
                completed=False,
                now_utc=NOW,
            )
    with pytest.raises(SessionValidationError):
        async with session_factory.begin() as session:
            await CourseProgressService.update_progress(
                session,
                user_id=user_id,
                course_session_id=uuid4(),
                position_seconds=-1,
                completed=False,
                now_utc=NOW,
            )
