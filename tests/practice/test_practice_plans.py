from __future__ import annotations

from uuid import uuid4

import pytest

from stillpoint.practice.plans.errors import PracticePlanNotFoundError, PracticePlanValidationError
from stillpoint.practice.plans.service import PracticePlanService
from tests.practice_fixtures import NOW, create_profile


@pytest.mark.asyncio
async def test_new_plan_replaces_previous_active_plan(session_factory) -> None:
    user_id = await create_profile(session_factory)

    async with session_factory.begin() as session:
        first = await PracticePlanService.upsert_practice_plan(
            session, user_id=user_id, frequency="daily", grace_days=1, now_utc=NOW
        )
    async with session_factory.begin() as session:
        second = await PracticePlanService.upsert_practice_plan(
            session,
            user_id=user_id,
            frequency="weekly",
            grace_days=7,
            target_sessions_per_week=4,
            now_utc=NOW,
        )
    async with session_factory() as session:
        active = await PracticePlanService.get_active_plan(session, user_id)

    assert first.plan_id != second.plan_id
    assert active is not None
    assert active.plan_id == second.plan_id
    assert active.grace_days == 7
    assert active.effective_grace_days == 3


@pytest.mark.asyncio
async def test_update_existing_plan_in_place(session_factory) -> None:
    user_id = await create_profile(session_factory)
    async with session_factory.begin() as session:
        created = await PracticePlanService.upsert_practice_plan(
            session, user_id=user_id, frequency="daily", grace_days=1, now_utc=NOW
        )

    async with session_factory.begin() as session:
        updated = await PracticePlanService.upsert_practice_plan(
            session,
            user_id=user_id,
            frequency="daily",
            grace_days=0,
            target_minutes_per_week=90,
            plan_id=created.plan_id,
            now_utc=NOW,
        )

    assert updated.plan_id == created.plan_id
    assert updated.effective_grace_days == 0
    assert updated.target_minutes_per_week == 90


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"frequency": "hourly"},
        {"grace_days": -1},
        {"target_sessions_per_week": 0},
    ],
)
async def test_plan_validation(session_factory, overrides) -> None:
    user_id = await create_profile(session_factory)
    params = {"frequency": "daily", "grace_days": 1}
    params.update(overrides)

    with pytest.raises(PracticePlanValidationError):
        async with session_factory.begin() as session:
            await PracticePlanService.upsert_practice_plan(session, user_id=user_id, now_utc=NOW, **params)


@pytest.mark.asyncio
async def test_updating_foreign_plan_is_not_found(session_factory) -> None:
    owner_id = await create_profile(session_factory)
    stranger_id = await create_profile(session_factory)
    async with session_factory.begin() as session:
        plan = await PracticePlanService.upsert_practice_plan(
            session, user_id=owner_id, frequency="daily", grace_days=1, now_utc=NOW
        )

    for plan_id in (plan.plan_id, uuid4()):
        with pytest.raises(PracticePlanNotFoundError):
            async with session_factory.begin() as session:
                await PracticePlanService.upsert_practice_plan(
                    session,
                    user_id=stranger_id,
                    frequency="daily",
                    grace_days=1,
                    plan_id=plan_id,
                    now_utc=NOW,
                )
