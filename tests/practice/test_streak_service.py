from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy import select

from stillpoint.db.models.streaks import Streak
from stillpoint.practice.plans.service import PracticePlanService
from stillpoint.practice.streak.errors import StreakValidationError
from stillpoint.practice.streak.service import StreakService
from stillpoint.practice.streak.types import StreakOutcome
from tests.practice_fixtures import NOW, create_profile


async def _update(session_factory, user_id, activity_date: date, streak_type: str = "overall"):
    async with session_factory.begin() as session:
        return await StreakService.update_streak(
            session,
            user_id=user_id,
            streak_type=streak_type,
            activity_date=activity_date,
            now_utc=NOW,
        )


@pytest.mark.asyncio
async def test_update_streak_continues_then_resets_after_long_gap(session_factory) -> None:
    user_id = await create_profile(session_factory)

    first = await _update(session_factory, user_id, date(2024, 1, 1))
    second = await _update(session_factory, user_id, date(2024, 1, 2))
    third = await _update(session_factory, user_id, date(2024, 1, 10))

    assert first.outcome == StreakOutcome.STARTED
    assert (second.outcome, second.current_streak) == (StreakOutcome.CONTINUED, 2)
    assert third.outcome == StreakOutcome.RESET
    assert third.current_streak == 1
    assert third.longest_streak == 2


@pytest.mark.asyncio
async def test_update_streak_same_day_is_idempotent(session_factory) -> None:
    user_id = await create_profile(session_factory)

    await _update(session_factory, user_id, date(2024, 3, 4))
    repeated = await _update(session_factory, user_id, date(2024, 3, 4))

    assert repeated.outcome == StreakOutcome.SAME_DAY
    assert repeated.current_streak == 1

    async with session_factory() as session:
        rows = (await session.execute(select(Streak).where(Streak.user_id == user_id))).scalars().all()
    assert len(rows) == 1
    assert rows[0].version == 0


@pytest.mark.asyncio
async def test_update_streak_applies_grace_from_active_plan(session_factory) -> None:
    user_id = await create_profile(session_factory)
    async with session_factory.begin() as session:
        await PracticePlanService.upsert_practice_plan(
            session,
            user_id=user_id,
            frequency="daily",
            grace_days=2,
            now_utc=NOW,
        )

    await _update(session_factory, user_id, date(2024, 1, 1))
    result = await _update(session_factory, user_id, date(2024, 1, 4))

    assert result.outcome == StreakOutcome.GRACE_APPLIED
    assert result.current_streak == 2
    assert result.grace_used == 2


@pytest.mark.asyncio
async def test_update_streak_tracks_types_independently(session_factory) -> None:
    user_id = await create_profile(session_factory)

    await _update(session_factory, user_id, date(2024, 1, 1), streak_type="meditation")
    await _update(session_factory, user_id, date(2024, 1, 2), streak_type="meditation")
    breathing = await _update(session_factory, user_id, date(2024, 1, 2), streak_type="breathing")

    assert breathing.outcome == StreakOutcome.STARTED
    assert breathing.current_streak == 1


@pytest.mark.asyncio
async def test_update_streak_rejects_unknown_type(session_factory) -> None:
    user_id = await create_profile(session_factory)

    with pytest.raises(StreakValidationError):
        await _update(session_factory, user_id, date(2024, 1, 1), streak_type="yoga")
