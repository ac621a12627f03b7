from __future__ import annotations

import asyncio
from uuid import UUID, uuid4

import pytest
from sqlalchemy import func, select

from stillpoint.db.models.meditation_sessions import MeditationSession
from stillpoint.db.models.profiles import Profile
from stillpoint.db.models.token_transactions import TokenTransaction
from stillpoint.db.models.user_purchases import UserPurchase
from stillpoint.db.session import SessionLocal
from stillpoint.rpc import ErrorCode, call_procedure
from tests.practice_fixtures import create_meditation

pytestmark = pytest.mark.integration


async def _create_profile() -> UUID:
    user_id = uuid4()
    async with SessionLocal.begin() as session:
        session.add(Profile(id=user_id, email=f"{user_id.hex[:12]}@example.com", full_name="Concurrency"))
    return user_id


@pytest.mark.asyncio
async def test_parallel_spends_never_overdraw_balance() -> None:
    user_id = await _create_profile()
    await call_procedure("process_token_purchase", user_id=user_id, amount=50, payment_method="card")

    results = await asyncio.gather(
        *[
            call_procedure("spend_tokens", user_id=user_id, amount=20, description=f"Parallel spend {index}")
            for index in range(5)
        ]
    )

    successes = [result for result in results if result.success]
    failures = [result for result in results if not result.success]
    assert len(successes) == 2
    assert {failure.code for failure in failures} == {ErrorCode.INSUFFICIENT_FUNDS}

    balance = await call_procedure("get_token_balance", user_id=user_id)
    assert balance.to_dict()["balance"] == 10

    async with SessionLocal() as session:
        result = await session.execute(select(TokenTransaction.amount).where(TokenTransaction.user_id == user_id))
        amounts = list(result.scalars())
    assert sorted(amounts) == [-20, -20, 50]


@pytest.mark.asyncio
async def test_parallel_content_purchases_charge_once() -> None:
    user_id = await _create_profile()
    entity_id = await create_meditation(SessionLocal, teacher_id=user_id, token_cost=30)
    await call_procedure("process_token_purchase", user_id=user_id, amount=100, payment_method="card")

    results = await asyncio.gather(
        *[
            call_procedure(
                "purchase_content",
                user_id=user_id,
                entity_type="meditation",
                entity_id=entity_id,
                token_cost=30,
            )
            for _ in range(4)
        ]
    )

    assert all(result.success for result in results)
    assert sum(1 for result in results if result.to_dict()["already_owned"] is False) == 1
    balance = await call_procedure("get_token_balance", user_id=user_id)
    assert balance.to_dict()["balance"] == 70


@pytest.mark.asyncio
async def test_parallel_free_purchases_without_token_account_record_one_entitlement() -> None:
    user_id = await _create_profile()
    entity_id = await create_meditation(SessionLocal, teacher_id=user_id, token_cost=0)

    results = await asyncio.gather(
        *[
            call_procedure(
                "purchase_content",
                user_id=user_id,
                entity_type="meditation",
                entity_id=entity_id,
                token_cost=0,
            )
            for _ in range(4)
        ]
    )

    assert all(result.success for result in results)
    assert sorted(result.to_dict()["already_owned"] for result in results) == [False, True, True, True]
    async with SessionLocal() as session:
        purchases = await session.scalar(
            select(func.count()).select_from(UserPurchase).where(UserPurchase.user_id == user_id)
        )
    assert purchases == 1


@pytest.mark.asyncio
async def test_parallel_sync_retries_store_one_session() -> None:
    user_id = await _create_profile()

    results = await asyncio.gather(
        *[
            call_procedure(
                "sync_meditation_session",
                user_id=user_id,
                session_type="guided",
                duration_minutes=15,
                status="completed",
                started_at="2024-01-09T07:00:00Z",
                completed_at="2024-01-09T07:15:00Z",
            )
            for _ in range(4)
        ]
    )

    assert all(result.success for result in results)
    assert len({result.to_dict()["session_id"] for result in results}) == 1
    async with SessionLocal() as session:
        stored = await session.scalar(
            select(func.count()).select_from(MeditationSession).where(MeditationSession.user_id == user_id)
        )
    assert stored == 1
