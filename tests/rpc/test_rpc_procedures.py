from __future__ import annotations

from uuid import uuid4

import pytest

from stillpoint.economy.tokens.observers import balance_changes
from stillpoint.rpc import ErrorCode, call_procedure
from tests.practice_fixtures import create_course, create_profile


@pytest.mark.asyncio
async def test_token_procedures_enforce_balance_and_publish_after_commit(session_factory) -> None:
    user_id = await create_profile(session_factory)
    published = []
    balance_changes.subscribe(published.append)

    purchased = await call_procedure("process_token_purchase", userId=str(user_id), amount=50, paymentMethod="card")
    spent = await call_procedure("spend_tokens", user_id=user_id, amount=30, description="Unlock course")
    rejected = await call_procedure("spend_tokens", user_id=user_id, amount=30, description="Unlock course")
    balance = await call_procedure("get_token_balance", userId=str(user_id))

    assert purchased.to_dict()["new_balance"] == 50
    assert spent.to_dict()["new_balance"] == 20
    assert rejected.success is False
    assert rejected.to_dict() == {
        "success": False,
        "error": "Insufficient tokens",
        "code": "E_INSUFFICIENT_FUNDS",
        "current_balance": 20,
    }
    assert balance.to_dict() == {"success": True, "balance": 20}
    assert [event.balance for event in published] == [50, 20]


@pytest.mark.asyncio
async def test_purchase_content_procedure_is_idempotent(session_factory) -> None:
    user_id = await create_profile(session_factory)
    teacher_id = await create_profile(session_factory)
    course_id, _ = await create_course(session_factory, teacher_id=teacher_id, token_cost=20)
    await call_procedure("process_token_purchase", user_id=user_id, amount=20, payment_method="card")

    params = {"userId": str(user_id), "entityType": "course", "entityId": str(course_id), "tokenCost": 20}
    first = await call_procedure("purchase_content", **params)
    second = await call_procedure("purchase_content", **params)
    access = await call_procedure(
        "has_access", userId=str(user_id), entityType="course", entityId=str(course_id), priceTokens=20
    )

    assert first.to_dict()["already_owned"] is False
    assert first.to_dict()["new_balance"] == 0
    assert second.to_dict()["already_owned"] is True
    assert second.to_dict()["new_balance"] == 0
    assert access.to_dict()["has_access"] is True


@pytest.mark.asyncio
async def test_meditation_procedures_report_conflict_after_abandon(session_factory) -> None:
    user_id = await create_profile(session_factory)

    started = await call_procedure("start_meditation_session", userId=str(user_id), sessionType="timer", durationMinutes=10)
    session_id = started.to_dict()["session_id"]
    abandoned = await call_procedure("abandon_meditation_session", userId=str(user_id), sessionId=session_id)
    completed = await call_procedure("complete_meditation_session", userId=str(user_id), sessionId=session_id)

    assert abandoned.to_dict()["status"] == "abandoned"
    assert completed.success is False
    assert completed.code == ErrorCode.CONFLICT


@pytest.mark.asyncio
async def test_completed_meditation_shows_up_in_dashboard(session_factory) -> None:
    user_id = await create_profile(session_factory)

    synced = await call_procedure(
        "sync_meditation_session",
        userId=str(user_id),
        sessionType="guided",
        durationMinutes=15,
        status="completed",
        startedAt="2024-01-09T07:00:00Z",
        completedAt="2024-01-09T07:15:00Z",
    )
    summary = await call_procedure("get_user_dashboard_summary", userId=str(user_id))
    stats = await call_procedure("get_user_progress_stats", userId=str(user_id))

    assert synced.success is True
    assert "session_id" in synced.to_dict()
    assert summary.to_dict()["total_sessions"] == 1
    assert summary.to_dict()["total_minutes"] == 15
    assert summary.to_dict()["current_streak"] == 1
    assert stats.to_dict()["longest_streak"] == 1


@pytest.mark.asyncio
async def test_update_streak_procedure(session_factory) -> None:
    user_id = await create_profile(session_factory)

    first = await call_procedure("update_streak", userId=str(user_id), activityDate="2024-01-01")
    second = await call_procedure("update_streak", userId=str(user_id), activityDate="2024-01-02")
    invalid = await call_procedure("update_streak", userId=str(user_id), activityDate="2024-01-03", streakType="yoga")

    assert first.to_dict()["outcome"] == "STARTED"
    assert second.to_dict()["current_streak"] == 2
    assert invalid.code == ErrorCode.VALIDATION


@pytest.mark.asyncio
async def test_goal_procedures_round_trip(session_factory) -> None:
    user_id = await create_profile(session_factory)

    created = await call_procedure(
        "create_goal", userId=str(user_id), title="Ten sits", goalType="total_sessions", targetValue=10
    )
    goal_id = created.to_dict()["goal_id"]
    listed = await call_procedure("list_active_goals", userId=str(user_id))
    cancelled = await call_procedure("cancel_goal", userId=str(user_id), goalId=goal_id)
    listed_after = await call_procedure("list_active_goals", userId=str(user_id))

    assert [goal["goal_id"] for goal in listed.to_dict()["goals"]] == [goal_id]
    assert cancelled.to_dict()["is_active"] is False
    assert listed_after.to_dict()["goals"] == []


@pytest.mark.asyncio
async def test_missing_records_map_to_not_found(session_factory) -> None:
    user_id = await create_profile(session_factory)

    notification = await call_procedure("mark_notification_read", userId=str(user_id), notificationId=str(uuid4()))
    enrollment = await call_procedure("enroll_in_course", userId=str(user_id), courseId=str(uuid4()))

    assert notification.code == ErrorCode.NOT_FOUND
    assert enrollment.code == ErrorCode.NOT_FOUND


@pytest.mark.asyncio
async def test_list_courses_procedure_returns_page(session_factory) -> None:
    user_id = await create_profile(session_factory)
    teacher_id = await create_profile(session_factory)
    course_id, _ = await create_course(session_factory, teacher_id=teacher_id, token_cost=0)

    listed = await call_procedure("list_courses", userId=str(user_id), limit=5)
    rejected = await call_procedure("list_courses", userId=str(user_id), offset=-1)

    payload = listed.to_dict()
    assert payload["limit"] == 5
    assert payload["offset"] == 0
    assert [course["course_id"] for course in payload["courses"]] == [str(course_id)]
    assert payload["courses"][0]["has_access"] is True
    assert rejected.code == ErrorCode.VALIDATION
