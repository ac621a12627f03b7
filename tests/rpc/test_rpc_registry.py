from __future__ import annotations

from uuid import uuid4

import pytest
from structlog.testing import capture_logs

from stillpoint.rpc import PROCEDURES, ErrorCode, call_procedure


def test_registry_exposes_core_procedures() -> None:
    expected = {
        "get_user_dashboard_summary",
        "get_user_progress_stats",
        "sync_meditation_session",
        "update_streak",
        "check_and_award_badges",
        "process_token_purchase",
        "spend_tokens",
        "purchase_content",
        "has_access",
    }
    assert expected.issubset(PROCEDURES)


@pytest.mark.asyncio
async def test_unknown_procedure_is_not_found() -> None:
    result = await call_procedure("drop_all_tables", userId=str(uuid4()))

    assert result.success is False
    assert result.code == ErrorCode.NOT_FOUND


@pytest.mark.asyncio
async def test_invalid_parameters_are_rejected_before_touching_storage() -> None:
    result = await call_procedure("spend_tokens", userId="not-a-uuid", amount=5, description="x", surprise=1)

    assert result.success is False
    assert result.code == ErrorCode.VALIDATION
    assert set(result.details["fields"]) >= {"userId", "surprise"}


@pytest.mark.asyncio
async def test_negative_token_cost_is_a_validation_error() -> None:
    result = await call_procedure(
        "purchase_content",
        userId=str(uuid4()),
        entityType="course",
        entityId=str(uuid4()),
        tokenCost=-1,
    )

    assert result.code == ErrorCode.VALIDATION
    assert result.details["fields"] == ["tokenCost"]


@pytest.mark.asyncio
async def test_failures_are_logged_with_procedure_name() -> None:
    with capture_logs() as logs:
        await call_procedure("drop_all_tables", userId=str(uuid4()))
        await call_procedure("spend_tokens", userId="nope", amount=1, description="x")

    failures = [entry for entry in logs if entry["event"] == "procedure_failed"]
    assert [(entry["procedure"], entry["code"]) for entry in failures] == [("spend_tokens", "E_VALIDATION")]
