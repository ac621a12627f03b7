from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import structlog
from pydantic import ValidationError

from stillpoint.rpc import procedures
from stillpoint.rpc.models import (
    CompleteBreathingSessionRequest,
    CreateGoalRequest,
    EnrollInCourseRequest,
    FinishMeditationSessionRequest,
    GoalRefRequest,
    HasAccessRequest,
    ListCoursesRequest,
    ListTokenTransactionsRequest,
    MarkNotificationReadRequest,
    MeditationSessionRefRequest,
    ProcedureRequest,
    PurchaseContentRequest,
    SpendTokensRequest,
    StartBreathingSessionRequest,
    StartMeditationSessionRequest,
    SyncMeditationSessionRequest,
    TokenPurchaseRequest,
    UpdateCourseProgressRequest,
    UpdateGoalRequest,
    UpdateStreakRequest,
    UpsertPracticePlanRequest,
    UserRequest,
)
from stillpoint.rpc.results import ErrorCode, ProcedureFailure, ProcedureResult

logger = structlog.get_logger("stillpoint.rpc")


@dataclass(frozen=True, slots=True)
class ProcedureEntry:
    request_model: type[ProcedureRequest]
    handler: Callable[[Any], Awaitable[ProcedureResult]]


PROCEDURES: dict[str, ProcedureEntry] = {
    "get_user_dashboard_summary": ProcedureEntry(UserRequest, procedures.get_user_dashboard_summary),
    "get_user_progress_stats": ProcedureEntry(UserRequest, procedures.get_user_progress_stats),
    "sync_meditation_session": ProcedureEntry(SyncMeditationSessionRequest, procedures.sync_meditation_session),
    "update_streak": ProcedureEntry(UpdateStreakRequest, procedures.update_streak),
    "check_and_award_badges": ProcedureEntry(UserRequest, procedures.check_and_award_badges),
    "process_token_purchase": ProcedureEntry(TokenPurchaseRequest, procedures.process_token_purchase),
    "spend_tokens": ProcedureEntry(SpendTokensRequest, procedures.spend_tokens),
    "purchase_content": ProcedureEntry(PurchaseContentRequest, procedures.purchase_content),
    "has_access": ProcedureEntry(HasAccessRequest, procedures.has_access),
    "get_token_balance": ProcedureEntry(UserRequest, procedures.get_token_balance),
    "list_token_transactions": ProcedureEntry(ListTokenTransactionsRequest, procedures.list_token_transactions),
    "list_user_purchases": ProcedureEntry(UserRequest, procedures.list_user_purchases),
    "upsert_practice_plan": ProcedureEntry(UpsertPracticePlanRequest, procedures.upsert_practice_plan),
    "create_goal": ProcedureEntry(CreateGoalRequest, procedures.create_goal),
    "update_goal": ProcedureEntry(UpdateGoalRequest, procedures.update_goal),
    "cancel_goal": ProcedureEntry(GoalRefRequest, procedures.cancel_goal),
    "list_active_goals": ProcedureEntry(UserRequest, procedures.list_active_goals),
    "start_meditation_session": ProcedureEntry(StartMeditationSessionRequest, procedures.start_meditation_session),
    "pause_meditation_session": ProcedureEntry(MeditationSessionRefRequest, procedures.pause_meditation_session),
    "resume_meditation_session": ProcedureEntry(MeditationSessionRefRequest, procedures.resume_meditation_session),
    "complete_meditation_session": ProcedureEntry(
        FinishMeditationSessionRequest,
        procedures.complete_meditation_session,
    ),
    "abandon_meditation_session": ProcedureEntry(
        FinishMeditationSessionRequest,
        procedures.abandon_meditation_session,
    ),
    "start_breathing_session": ProcedureEntry(StartBreathingSessionRequest, procedures.start_breathing_session),
    "complete_breathing_session": ProcedureEntry(
        CompleteBreathingSessionRequest,
        procedures.complete_breathing_session,
    ),
    "update_course_progress": ProcedureEntry(UpdateCourseProgressRequest, procedures.update_course_progress),
    "enroll_in_course": ProcedureEntry(EnrollInCourseRequest, procedures.enroll_in_course),
    "list_courses": ProcedureEntry(ListCoursesRequest, procedures.list_courses),
    "get_user_courses_with_progress": ProcedureEntry(UserRequest, procedures.get_user_courses_with_progress),
    "mark_notification_read": ProcedureEntry(MarkNotificationReadRequest, procedures.mark_notification_read),
}


def _validation_failure(exc: ValidationError) -> ProcedureFailure:
    fields = sorted({".".join(str(part) for part in error["loc"]) for error in exc.errors()})
    return ProcedureFailure(
        code=ErrorCode.VALIDATION,
        error="Invalid parameters",
        details={"fields": fields},
    )


async def call_procedure(name: str, **params: object) -> ProcedureResult:
    entry = PROCEDURES.get(name)
    if entry is None:
        return ProcedureFailure(code=ErrorCode.NOT_FOUND, error=f"Unknown procedure: {name}")

    try:
        payload = entry.request_model.model_validate(params)
    except ValidationError as exc:
        failure = _validation_failure(exc)
    else:
        with structlog.contextvars.bound_contextvars(procedure=name):
            result = await entry.handler(payload)
        if result.success:
            return result
        failure = result

    logger.info(
        "procedure_failed",
        procedure=name,
        code=failure.code.value,
        error=failure.error,
    )
    return failure
