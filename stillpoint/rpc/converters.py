from __future__ import annotations

from stillpoint.economy.content.types import CatalogCourse, CourseWithProgress, UserPurchaseView
from stillpoint.economy.tokens.types import TokenTransactionView
from stillpoint.practice.activity.types import ActivityResult
from stillpoint.practice.goals.types import GoalView
from stillpoint.practice.plans.types import PracticePlanView
from stillpoint.practice.sessions.types import BreathingSessionView, CourseProgressView, MeditationSessionView
from stillpoint.practice.streak.types import StreakUpdateResult
from stillpoint.rpc.models import (
    ActivityResponse,
    BreathingSessionResponse,
    CatalogCourseResponse,
    CourseProgressResponse,
    CourseWithProgressResponse,
    GoalResponse,
    MeditationSessionResponse,
    PracticePlanResponse,
    StreakResponse,
    TokenTransactionResponse,
    UserPurchaseResponse,
)


def streak_response(result: StreakUpdateResult) -> StreakResponse:
    return StreakResponse(
        streak_type=result.streak_type,
        outcome=result.outcome.value,
        current_streak=result.current_streak,
        longest_streak=result.longest_streak,
        grace_used=result.grace_used,
        last_activity_date=result.last_activity_date,
    )


def activity_response(activity: ActivityResult | None) -> ActivityResponse | None:
    if activity is None:
        return None
    return ActivityResponse(
        streaks=[streak_response(streak) for streak in activity.streaks],
        completed_goal_ids=list(activity.completed_goal_ids),
        awarded_badges=[badge.name for badge in activity.awarded_badges],
    )


def meditation_session_response(view: MeditationSessionView) -> MeditationSessionResponse:
    return MeditationSessionResponse(
        session_id=view.session_id,
        status=view.status.value,
        duration_minutes=view.duration_minutes,
        total_minutes_meditated=view.total_minutes_meditated,
        idempotent_replay=view.idempotent_replay,
        activity=activity_response(view.activity),
    )


def breathing_session_response(view: BreathingSessionView) -> BreathingSessionResponse:
    return BreathingSessionResponse(
        session_id=view.session_id,
        pattern_name=view.pattern_name,
        rounds_completed=view.rounds_completed,
        total_duration_seconds=view.total_duration_seconds,
        completed=view.completed_at is not None,
        idempotent_replay=view.idempotent_replay,
        activity=activity_response(view.activity),
    )


def course_progress_response(view: CourseProgressView) -> CourseProgressResponse:
    return CourseProgressResponse(
        course_session_id=view.course_session_id,
        last_position_seconds=view.last_position_seconds,
        completed=view.completed_at is not None,
        newly_completed=view.newly_completed,
        activity=activity_response(view.activity),
    )


def goal_response(view: GoalView) -> GoalResponse:
    return GoalResponse(
        goal_id=view.goal_id,
        title=view.title,
        description=view.description,
        goal_type=view.goal_type,
        target_value=view.target_value,
        current_value=view.current_value,
        is_active=view.is_active,
        deadline=view.deadline,
        completed_at=view.completed_at,
    )


def practice_plan_response(view: PracticePlanView) -> PracticePlanResponse:
    return PracticePlanResponse(
        plan_id=view.plan_id,
        frequency=view.frequency,
        target_sessions_per_week=view.target_sessions_per_week,
        target_minutes_per_week=view.target_minutes_per_week,
        grace_days=view.grace_days,
        effective_grace_days=view.effective_grace_days,
        is_active=view.is_active,
    )


def token_transaction_response(view: TokenTransactionView) -> TokenTransactionResponse:
    return TokenTransactionResponse(
        transaction_id=view.transaction_id,
        amount=view.amount,
        transaction_type=view.transaction_type,
        description=view.description,
        entity_type=view.entity_type,
        entity_id=view.entity_id,
        balance_after=view.balance_after,
        created_at=view.created_at,
    )


def user_purchase_response(view: UserPurchaseView) -> UserPurchaseResponse:
    return UserPurchaseResponse(
        purchase_id=view.purchase_id,
        entity_type=view.entity_type,
        entity_id=view.entity_id,
        token_cost=view.token_cost,
        purchased_at=view.purchased_at,
    )


def catalog_course_response(view: CatalogCourse) -> CatalogCourseResponse:
    return CatalogCourseResponse(
        course_id=view.course_id,
        title=view.title,
        description=view.description,
        teacher_name=view.teacher_name,
        token_cost=view.token_cost,
        session_count=view.session_count,
        created_at=view.created_at,
        has_access=view.has_access,
    )


def course_with_progress_response(view: CourseWithProgress) -> CourseWithProgressResponse:
    return CourseWithProgressResponse(
        course_id=view.course_id,
        course_title=view.course_title,
        course_description=view.course_description,
        teacher_name=view.teacher_name,
        total_sessions=view.total_sessions,
        completed_sessions=view.completed_sessions,
        progress_percentage=view.progress_percentage,
    )
