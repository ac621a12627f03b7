from __future__ import annotations

from datetime import date
from uuid import uuid4

import pytest

from stillpoint.practice.goals.errors import GoalNotFoundError, GoalValidationError
from stillpoint.practice.goals.service import GoalService
from stillpoint.practice.goals.types import ActivityProgress
from tests.practice_fixtures import NOW, create_profile


async def _create_goal(session_factory, user_id, *, goal_type: str = "total_sessions", target_value: int = 2):
    async with session_factory.begin() as session:
        return await GoalService.create_goal(
            session,
            user_id=user_id,
            title="  Sit every morning  ",
            goal_type=goal_type,
            target_value=target_value,
            now_utc=NOW,
        )


@pytest.mark.asyncio
async def test_create_goal_trims_title_and_starts_at_zero(session_factory) -> None:
    user_id = await create_profile(session_factory)

    goal = await _create_goal(session_factory, user_id)

    assert goal.title == "Sit every morning"
    assert goal.current_value == 0
    assert goal.is_active is True


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("title", "goal_type", "target_value"),
    [
        ("", "total_sessions", 3),
        ("Sit", "chanting", 3),
        ("Sit", "total_sessions", 0),
    ],
)
async def test_create_goal_rejects_invalid_input(session_factory, title, goal_type, target_value) -> None:
    user_id = await create_profile(session_factory)

    with pytest.raises(GoalValidationError):
        async with session_factory.begin() as session:
            await GoalService.create_goal(
                session,
                user_id=user_id,
                title=title,
                goal_type=goal_type,
                target_value=target_value,
                now_utc=NOW,
            )


@pytest.mark.asyncio
async def test_apply_activity_completes_goal_once(session_factory) -> None:
    user_id = await create_profile(session_factory)
    goal = await _create_goal(session_factory, user_id, target_value=2)
    progress = ActivityProgress(
        activity_date=date(2024, 1, 10),
        sessions_delta=1,
        minutes_delta=10,
        overall_streak=1,
        weekly_sessions=1,
    )

    async with session_factory.begin() as session:
        first = await GoalService.apply_activity(session, user_id=user_id, progress=progress, now_utc=NOW)
    async with session_factory.begin() as session:
        second = await GoalService.apply_activity(session, user_id=user_id, progress=progress, now_utc=NOW)
    async with session_factory.begin() as session:
        third = await GoalService.apply_activity(session, user_id=user_id, progress=progress, now_utc=NOW)
        active = await GoalService.list_active_goals(session, user_id)

    assert first == []
    assert second == [goal.goal_id]
    assert third == []
    assert active == []


@pytest.mark.asyncio
async def test_update_goal_lowering_target_completes_goal(session_factory) -> None:
    user_id = await create_profile(session_factory)
    goal = await _create_goal(session_factory, user_id, target_value=5)
    async with session_factory.begin() as session:
        await GoalService.apply_activity(
            session,
            user_id=user_id,
            progress=ActivityProgress(
                activity_date=date(2024, 1, 10),
                sessions_delta=1,
                minutes_delta=10,
                overall_streak=1,
                weekly_sessions=1,
            ),
            now_utc=NOW,
        )

    async with session_factory.begin() as session:
        updated = await GoalService.update_goal(
            session,
            user_id=user_id,
            goal_id=goal.goal_id,
            target_value=1,
            now_utc=NOW,
        )

    assert updated.is_active is False
    assert updated.completed_at is not None

    with pytest.raises(GoalValidationError):
        async with session_factory.begin() as session:
            await GoalService.update_goal(
                session,
                user_id=user_id,
                goal_id=goal.goal_id,
                title="Too late",
                now_utc=NOW,
            )


@pytest.mark.asyncio
async def test_cancel_goal_is_idempotent_and_scoped_to_owner(session_factory) -> None:
    user_id = await create_profile(session_factory)
    other_user_id = await create_profile(session_factory)
    goal = await _create_goal(session_factory, user_id)

    with pytest.raises(GoalNotFoundError):
        async with session_factory.begin() as session:
            await GoalService.cancel_goal(session, user_id=other_user_id, goal_id=goal.goal_id, now_utc=NOW)

    async with session_factory.begin() as session:
        first = await GoalService.cancel_goal(session, user_id=user_id, goal_id=goal.goal_id, now_utc=NOW)
    async with session_factory.begin() as session:
        second = await GoalService.cancel_goal(session, user_id=user_id, goal_id=goal.goal_id, now_utc=NOW)

    assert first.is_active is False
    assert second.is_active is False
    assert second.completed_at is None


@pytest.mark.asyncio
async def test_cancel_unknown_goal_raises_not_found(session_factory) -> None:
    user_id = await create_profile(session_factory)

    with pytest.raises(GoalNotFoundError):
        async with session_factory.begin() as session:
            await GoalService.cancel_goal(session, user_id=user_id, goal_id=uuid4(), now_utc=NOW)
