from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from stillpoint.db.session import SessionLocal
from stillpoint.economy.content.service import ContentService
from stillpoint.economy.tokens.observers import balance_changes
from stillpoint.economy.tokens.service import TokenLedgerService
from stillpoint.practice.badges.service import BadgeService
from stillpoint.practice.goals.service import GoalService
from stillpoint.practice.notifications.service import NotificationService
from stillpoint.practice.plans.service import PracticePlanService
from stillpoint.practice.sessions.breathing import BreathingSessionService
from stillpoint.practice.sessions.course_progress import CourseProgressService
from stillpoint.practice.sessions.meditation import MeditationSessionService
from stillpoint.practice.streak.service import StreakService
from stillpoint.profiles.service import ProfileService
from stillpoint.rpc.converters import (
    breathing_session_response,
    catalog_course_response,
    course_progress_response,
    course_with_progress_response,
    goal_response,
    meditation_session_response,
    practice_plan_response,
    streak_response,
    token_transaction_response,
    user_purchase_response,
)
from stillpoint.rpc.errors import DOMAIN_ERRORS, failure_from_error
from stillpoint.rpc.models import (
    BadgeCheckResponse,
    CatalogCoursesResponse,
    CompleteBreathingSessionRequest,
    CoursesWithProgressResponse,
    CreateGoalRequest,
    DashboardSummaryResponse,
    EnrollInCourseRequest,
    EnrollmentResponse,
    FinishMeditationSessionRequest,
    GoalRefRequest,
    GoalsResponse,
    HasAccessRequest,
    HasAccessResponse,
    ListCoursesRequest,
    ListTokenTransactionsRequest,
    MarkNotificationReadRequest,
    MeditationSessionRefRequest,
    NotificationReadResponse,
    PeriodTotalsResponse,
    ProgressStatsResponse,
    PurchaseContentRequest,
    PurchaseContentResponse,
    SessionIdResponse,
    SpendTokensRequest,
    SpendTokensResponse,
    StartBreathingSessionRequest,
    StartMeditationSessionRequest,
    SyncMeditationSessionRequest,
    TokenBalanceResponse,
    TokenPurchaseRequest,
    TokenPurchaseResponse,
    TokenTransactionsResponse,
    UpdateCourseProgressRequest,
    UpdateGoalRequest,
    UpdateStreakRequest,
    UpsertPracticePlanRequest,
    UserPurchasesResponse,
    UserRequest,
)
from stillpoint.rpc.results import ProcedureResult, ProcedureSuccess
from stillpoint.stats.service import StatsService


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


@asynccontextmanager
async def _user_transaction(user_id: UUID) -> AsyncIterator[AsyncSession]:
    async with SessionLocal.begin() as session:
        await ProfileService.require_profile(session, user_id)
        yield session


async def get_user_dashboard_summary(payload: UserRequest) -> ProcedureResult:
    async with SessionLocal.begin() as session:
        summary = await StatsService.get_dashboard_summary(session, user_id=payload.user_id)

    return ProcedureSuccess(
        DashboardSummaryResponse(
            total_sessions=summary.total_sessions,
            total_minutes=summary.total_minutes,
            current_streak=summary.current_streak,
            token_balance=summary.token_balance,
            active_goals=summary.active_goals,
            unread_notifications=summary.unread_notifications,
            enrolled_courses=summary.enrolled_courses,
        )
    )


async def get_user_progress_stats(payload: UserRequest) -> ProcedureResult:
    async with SessionLocal.begin() as session:
        stats = await StatsService.get_progress_stats(session, user_id=payload.user_id, now_utc=_now_utc())

    return ProcedureSuccess(
        ProgressStatsResponse(
            weekly=PeriodTotalsResponse(sessions=stats.weekly.sessions, minutes=stats.weekly.minutes),
            monthly=PeriodTotalsResponse(sessions=stats.monthly.sessions, minutes=stats.monthly.minutes),
            breathing_sessions=stats.breathing_sessions,
            courses_completed=stats.courses_completed,
            badges_earned=stats.badges_earned,
            longest_streak=stats.longest_streak,
        )
    )


async def sync_meditation_session(payload: SyncMeditationSessionRequest) -> ProcedureResult:
    try:
        async with _user_transaction(payload.user_id) as session:
            view = await MeditationSessionService.sync_session(
                session,
                user_id=payload.user_id,
                session_type=payload.session_type,
                duration_minutes=payload.duration_minutes,
                status=payload.status,
                started_at=payload.started_at,
                completed_at=payload.completed_at,
                total_minutes=payload.total_minutes,
                now_utc=_now_utc(),
            )
    except DOMAIN_ERRORS as exc:
        return failure_from_error(exc)

    return ProcedureSuccess(SessionIdResponse(session_id=view.session_id))


async def update_streak(payload: UpdateStreakRequest) -> ProcedureResult:
    try:
        async with _user_transaction(payload.user_id) as session:
            result = await StreakService.update_streak(
                session,
                user_id=payload.user_id,
                streak_type=payload.streak_type,
                activity_date=payload.activity_date,
                now_utc=_now_utc(),
            )
    except DOMAIN_ERRORS as exc:
        return failure_from_error(exc)

    return ProcedureSuccess(streak_response(result))


async def check_and_award_badges(payload: UserRequest) -> ProcedureResult:
    try:
        async with _user_transaction(payload.user_id) as session:
            awarded = await BadgeService.check_and_award_badges(
                session,
                user_id=payload.user_id,
                now_utc=_now_utc(),
            )
    except DOMAIN_ERRORS as exc:
        return failure_from_error(exc)

    return ProcedureSuccess(BadgeCheckResponse(awarded_badges=[badge.name for badge in awarded]))


async def process_token_purchase(payload: TokenPurchaseRequest) -> ProcedureResult:
    try:
        async with _user_transaction(payload.user_id) as session:
            result = await TokenLedgerService.purchase_tokens(
                session,
                user_id=payload.user_id,
                amount=payload.amount,
                payment_method=payload.payment_method,
                now_utc=_now_utc(),
            )
    except DOMAIN_ERRORS as exc:
        return failure_from_error(exc)

    balance_changes.publish(result.event)
    return ProcedureSuccess(
        TokenPurchaseResponse(new_balance=result.new_balance, transaction_id=result.transaction_id)
    )


async def spend_tokens(payload: SpendTokensRequest) -> ProcedureResult:
    try:
        async with _user_transaction(payload.user_id) as session:
            result = await TokenLedgerService.spend_tokens(
                session,
                user_id=payload.user_id,
                amount=payload.amount,
                description=payload.description,
                entity_type=payload.entity_type,
                entity_id=payload.entity_id,
                now_utc=_now_utc(),
            )
    except DOMAIN_ERRORS as exc:
        return failure_from_error(exc)

    balance_changes.publish(result.event)
    return ProcedureSuccess(
        SpendTokensResponse(new_balance=result.new_balance, transaction_id=result.transaction_id)
    )


async def purchase_content(payload: PurchaseContentRequest) -> ProcedureResult:
    try:
        async with _user_transaction(payload.user_id) as session:
            result = await ContentService.purchase_content(
                session,
                user_id=payload.user_id,
                entity_type=payload.entity_type,
                entity_id=payload.entity_id,
                token_cost=payload.token_cost,
                now_utc=_now_utc(),
            )
    except DOMAIN_ERRORS as exc:
        return failure_from_error(exc)

    if result.event is not None:
        balance_changes.publish(result.event)
    return ProcedureSuccess(
        PurchaseContentResponse(
            new_balance=result.new_balance,
            already_owned=result.idempotent_replay,
            transaction_id=result.transaction_id,
        )
    )


async def has_access(payload: HasAccessRequest) -> ProcedureResult:
    try:
        async with SessionLocal.begin() as session:
            allowed = await ContentService.has_access(
                session,
                user_id=payload.user_id,
                entity_type=payload.entity_type,
                entity_id=payload.entity_id,
                price_tokens=payload.price_tokens,
            )
    except DOMAIN_ERRORS as exc:
        return failure_from_error(exc)

    return ProcedureSuccess(HasAccessResponse(has_access=allowed))


async def get_token_balance(payload: UserRequest) -> ProcedureResult:
    async with SessionLocal.begin() as session:
        balance = await TokenLedgerService.get_balance(session, payload.user_id)

    return ProcedureSuccess(TokenBalanceResponse(balance=balance))


async def list_token_transactions(payload: ListTokenTransactionsRequest) -> ProcedureResult:
    try:
        async with SessionLocal.begin() as session:
            transactions = await TokenLedgerService.list_transactions(
                session,
                user_id=payload.user_id,
                limit=payload.limit,
            )
    except DOMAIN_ERRORS as exc:
        return failure_from_error(exc)

    return ProcedureSuccess(
        TokenTransactionsResponse(
            transactions=[token_transaction_response(transaction) for transaction in transactions]
        )
    )


async def list_user_purchases(payload: UserRequest) -> ProcedureResult:
    async with SessionLocal.begin() as session:
        purchases = await ContentService.list_user_purchases(session, payload.user_id)

    return ProcedureSuccess(
        UserPurchasesResponse(purchases=[user_purchase_response(purchase) for purchase in purchases])
    )


async def upsert_practice_plan(payload: UpsertPracticePlanRequest) -> ProcedureResult:
    try:
        async with _user_transaction(payload.user_id) as session:
            plan = await PracticePlanService.upsert_practice_plan(
                session,
                user_id=payload.user_id,
                frequency=payload.frequency,
                grace_days=payload.grace_days,
                target_sessions_per_week=payload.target_sessions_per_week,
                target_minutes_per_week=payload.target_minutes_per_week,
                plan_id=payload.plan_id,
                now_utc=_now_utc(),
            )
    except DOMAIN_ERRORS as exc:
        return failure_from_error(exc)

    return ProcedureSuccess(practice_plan_response(plan))


async def create_goal(payload: CreateGoalRequest) -> ProcedureResult:
    try:
        async with _user_transaction(payload.user_id) as session:
            goal = await GoalService.create_goal(
                session,
                user_id=payload.user_id,
                title=payload.title,
                goal_type=payload.goal_type,
                target_value=payload.target_value,
                description=payload.description,
                deadline=payload.deadline,
                now_utc=_now_utc(),
            )
    except DOMAIN_ERRORS as exc:
        return failure_from_error(exc)

    return ProcedureSuccess(goal_response(goal))


async def update_goal(payload: UpdateGoalRequest) -> ProcedureResult:
    try:
        async with _user_transaction(payload.user_id) as session:
            goal = await GoalService.update_goal(
                session,
                user_id=payload.user_id,
                goal_id=payload.goal_id,
                title=payload.title,
                description=payload.description,
                target_value=payload.target_value,
                deadline=payload.deadline,
                now_utc=_now_utc(),
            )
    except DOMAIN_ERRORS as exc:
        return failure_from_error(exc)

    return ProcedureSuccess(goal_response(goal))


async def cancel_goal(payload: GoalRefRequest) -> ProcedureResult:
    try:
        async with _user_transaction(payload.user_id) as session:
            goal = await GoalService.cancel_goal(
                session,
                user_id=payload.user_id,
                goal_id=payload.goal_id,
                now_utc=_now_utc(),
            )
    except DOMAIN_ERRORS as exc:
        return failure_from_error(exc)

    return ProcedureSuccess(goal_response(goal))


async def list_active_goals(payload: UserRequest) -> ProcedureResult:
    async with SessionLocal.begin() as session:
        goals = await GoalService.list_active_goals(session, payload.user_id)

    return ProcedureSuccess(GoalsResponse(goals=[goal_response(goal) for goal in goals]))


async def start_meditation_session(payload: StartMeditationSessionRequest) -> ProcedureResult:
    try:
        async with _user_transaction(payload.user_id) as session:
            view = await MeditationSessionService.start_session(
                session,
                user_id=payload.user_id,
                session_type=payload.session_type,
                duration_minutes=payload.duration_minutes,
                interval_minutes=payload.interval_minutes,
                started_at=payload.started_at,
                now_utc=_now_utc(),
            )
    except DOMAIN_ERRORS as exc:
        return failure_from_error(exc)

    return ProcedureSuccess(meditation_session_response(view))


async def pause_meditation_session(payload: MeditationSessionRefRequest) -> ProcedureResult:
    try:
        async with _user_transaction(payload.user_id) as session:
            view = await MeditationSessionService.pause_session(
                session,
                user_id=payload.user_id,
                session_id=payload.session_id,
                now_utc=_now_utc(),
            )
    except DOMAIN_ERRORS as exc:
        return failure_from_error(exc)

    return ProcedureSuccess(meditation_session_response(view))


async def resume_meditation_session(payload: MeditationSessionRefRequest) -> ProcedureResult:
    try:
        async with _user_transaction(payload.user_id) as session:
            view = await MeditationSessionService.resume_session(
                session,
                user_id=payload.user_id,
                session_id=payload.session_id,
                now_utc=_now_utc(),
            )
    except DOMAIN_ERRORS as exc:
        return failure_from_error(exc)

    return ProcedureSuccess(meditation_session_response(view))


async def complete_meditation_session(payload: FinishMeditationSessionRequest) -> ProcedureResult:
    try:
        async with _user_transaction(payload.user_id) as session:
            view = await MeditationSessionService.complete_session(
                session,
                user_id=payload.user_id,
                session_id=payload.session_id,
                total_minutes=payload.total_minutes,
                now_utc=_now_utc(),
            )
    except DOMAIN_ERRORS as exc:
        return failure_from_error(exc)

    return ProcedureSuccess(meditation_session_response(view))


async def abandon_meditation_session(payload: FinishMeditationSessionRequest) -> ProcedureResult:
    try:
        async with _user_transaction(payload.user_id) as session:
            view = await MeditationSessionService.abandon_session(
                session,
                user_id=payload.user_id,
                session_id=payload.session_id,
                total_minutes=payload.total_minutes,
                now_utc=_now_utc(),
            )
    except DOMAIN_ERRORS as exc:
        return failure_from_error(exc)

    return ProcedureSuccess(meditation_session_response(view))


async def start_breathing_session(payload: StartBreathingSessionRequest) -> ProcedureResult:
    try:
        async with _user_transaction(payload.user_id) as session:
            view = await BreathingSessionService.start_session(
                session,
                user_id=payload.user_id,
                pattern_name=payload.pattern_name,
                inhale_seconds=payload.inhale_seconds,
                hold_seconds=payload.hold_seconds,
                exhale_seconds=payload.exhale_seconds,
                now_utc=_now_utc(),
            )
    except DOMAIN_ERRORS as exc:
        return failure_from_error(exc)

    return ProcedureSuccess(breathing_session_response(view))


async def complete_breathing_session(payload: CompleteBreathingSessionRequest) -> ProcedureResult:
    try:
        async with _user_transaction(payload.user_id) as session:
            view = await BreathingSessionService.complete_session(
                session,
                user_id=payload.user_id,
                session_id=payload.session_id,
                rounds_completed=payload.rounds_completed,
                total_duration_seconds=payload.total_duration_seconds,
                now_utc=_now_utc(),
            )
    except DOMAIN_ERRORS as exc:
        return failure_from_error(exc)

    return ProcedureSuccess(breathing_session_response(view))


async def update_course_progress(payload: UpdateCourseProgressRequest) -> ProcedureResult:
    try:
        async with _user_transaction(payload.user_id) as session:
            view = await CourseProgressService.update_progress(
                session,
                user_id=payload.user_id,
                course_session_id=payload.course_session_id,
                position_seconds=payload.position_seconds,
                completed=payload.completed,
                now_utc=_now_utc(),
            )
    except DOMAIN_ERRORS as exc:
        return failure_from_error(exc)

    return ProcedureSuccess(course_progress_response(view))


async def enroll_in_course(payload: EnrollInCourseRequest) -> ProcedureResult:
    try:
        async with _user_transaction(payload.user_id) as session:
            enrolled = await ContentService.enroll_in_course(
                session,
                user_id=payload.user_id,
                course_id=payload.course_id,
                now_utc=_now_utc(),
            )
    except DOMAIN_ERRORS as exc:
        return failure_from_error(exc)

    return ProcedureSuccess(EnrollmentResponse(course_id=payload.course_id, newly_enrolled=enrolled))


async def list_courses(payload: ListCoursesRequest) -> ProcedureResult:
    try:
        async with SessionLocal.begin() as session:
            courses = await ContentService.list_courses(
                session,
                user_id=payload.user_id,
                limit=payload.limit,
                offset=payload.offset,
            )
    except DOMAIN_ERRORS as exc:
        return failure_from_error(exc)

    return ProcedureSuccess(
        CatalogCoursesResponse(
            courses=[catalog_course_response(course) for course in courses],
            limit=payload.limit,
            offset=payload.offset,
        )
    )


async def get_user_courses_with_progress(payload: UserRequest) -> ProcedureResult:
    async with SessionLocal.begin() as session:
        courses = await ContentService.get_user_courses_with_progress(session, payload.user_id)

    return ProcedureSuccess(
        CoursesWithProgressResponse(courses=[course_with_progress_response(course) for course in courses])
    )


async def mark_notification_read(payload: MarkNotificationReadRequest) -> ProcedureResult:
    try:
        async with _user_transaction(payload.user_id) as session:
            result = await NotificationService.mark_read(
                session,
                user_id=payload.user_id,
                notification_id=payload.notification_id,
                now_utc=_now_utc(),
            )
    except DOMAIN_ERRORS as exc:
        return failure_from_error(exc)

    return ProcedureSuccess(
        NotificationReadResponse(notification_id=result.notification_id, already_read=result.already_read)
    )
