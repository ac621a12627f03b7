from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ProcedureRequest(BaseModel):
    """Accepts snake_case and camelCase parameter names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    user_id: UUID


class UserRequest(ProcedureRequest):
    pass


class SyncMeditationSessionRequest(ProcedureRequest):
    session_type: str = Field(min_length=1, max_length=32)
    duration_minutes: int = Field(gt=0)
    status: str = Field(min_length=1, max_length=16)
    started_at: datetime
    completed_at: datetime | None = None
    total_minutes: int | None = Field(default=None, ge=0)


class UpdateStreakRequest(ProcedureRequest):
    activity_date: date
    streak_type: str = Field(default="overall", min_length=1, max_length=32)


class TokenPurchaseRequest(ProcedureRequest):
    amount: int
    payment_method: str = Field(min_length=1, max_length=64)


class SpendTokensRequest(ProcedureRequest):
    amount: int
    description: str = Field(min_length=1, max_length=500)
    entity_type: str | None = None
    entity_id: UUID | None = None


class PurchaseContentRequest(ProcedureRequest):
    entity_type: str
    entity_id: UUID
    token_cost: int = Field(ge=0)


class HasAccessRequest(ProcedureRequest):
    entity_type: str
    entity_id: UUID
    price_tokens: int = Field(ge=0)


class ListTokenTransactionsRequest(ProcedureRequest):
    limit: int = 50


class ListCoursesRequest(ProcedureRequest):
    limit: int = 20
    offset: int = 0


class UpsertPracticePlanRequest(ProcedureRequest):
    frequency: str
    grace_days: int
    target_sessions_per_week: int | None = None
    target_minutes_per_week: int | None = None
    plan_id: UUID | None = None


class CreateGoalRequest(ProcedureRequest):
    title: str = Field(max_length=200)
    goal_type: str
    target_value: int
    description: str | None = None
    deadline: date | None = None


class UpdateGoalRequest(ProcedureRequest):
    goal_id: UUID
    title: str | None = Field(default=None, max_length=200)
    description: str | None = None
    target_value: int | None = None
    deadline: date | None = None


class GoalRefRequest(ProcedureRequest):
    goal_id: UUID


class StartMeditationSessionRequest(ProcedureRequest):
    session_type: str = Field(min_length=1, max_length=32)
    duration_minutes: int
    interval_minutes: int | None = None
    started_at: datetime | None = None


class MeditationSessionRefRequest(ProcedureRequest):
    session_id: UUID


class FinishMeditationSessionRequest(ProcedureRequest):
    session_id: UUID
    total_minutes: int | None = None


class StartBreathingSessionRequest(ProcedureRequest):
    pattern_name: str = Field(max_length=120)
    inhale_seconds: int
    hold_seconds: int
    exhale_seconds: int


class CompleteBreathingSessionRequest(ProcedureRequest):
    session_id: UUID
    rounds_completed: int
    total_duration_seconds: int


class UpdateCourseProgressRequest(ProcedureRequest):
    course_session_id: UUID
    position_seconds: int
    completed: bool = False


class EnrollInCourseRequest(ProcedureRequest):
    course_id: UUID


class MarkNotificationReadRequest(ProcedureRequest):
    notification_id: UUID


class DashboardSummaryResponse(BaseModel):
    total_sessions: int
    total_minutes: int
    current_streak: int
    token_balance: int
    active_goals: int
    unread_notifications: int
    enrolled_courses: int


class PeriodTotalsResponse(BaseModel):
    sessions: int
    minutes: int


class ProgressStatsResponse(BaseModel):
    weekly: PeriodTotalsResponse
    monthly: PeriodTotalsResponse
    breathing_sessions: int
    courses_completed: int
    badges_earned: int
    longest_streak: int


class StreakResponse(BaseModel):
    streak_type: str
    outcome: str
    current_streak: int
    longest_streak: int
    grace_used: int
    last_activity_date: date


class ActivityResponse(BaseModel):
    streaks: list[StreakResponse]
    completed_goal_ids: list[UUID]
    awarded_badges: list[str]


class SessionIdResponse(BaseModel):
    session_id: UUID


class MeditationSessionResponse(BaseModel):
    session_id: UUID
    status: str
    duration_minutes: int
    total_minutes_meditated: int | None
    idempotent_replay: bool
    activity: ActivityResponse | None = None


class BreathingSessionResponse(BaseModel):
    session_id: UUID
    pattern_name: str
    rounds_completed: int
    total_duration_seconds: int
    completed: bool
    idempotent_replay: bool
    activity: ActivityResponse | None = None


class CourseProgressResponse(BaseModel):
    course_session_id: UUID
    last_position_seconds: int
    completed: bool
    newly_completed: bool
    activity: ActivityResponse | None = None


class BadgeCheckResponse(BaseModel):
    awarded_badges: list[str]


class TokenPurchaseResponse(BaseModel):
    new_balance: int
    transaction_id: UUID


class SpendTokensResponse(BaseModel):
    new_balance: int
    transaction_id: UUID


class PurchaseContentResponse(BaseModel):
    new_balance: int
    already_owned: bool
    transaction_id: UUID | None = None


class HasAccessResponse(BaseModel):
    has_access: bool


class TokenBalanceResponse(BaseModel):
    balance: int


class TokenTransactionResponse(BaseModel):
    transaction_id: UUID
    amount: int
    transaction_type: str
    description: str
    entity_type: str | None
    entity_id: UUID | None
    balance_after: int
    created_at: datetime


class TokenTransactionsResponse(BaseModel):
    transactions: list[TokenTransactionResponse]


class UserPurchaseResponse(BaseModel):
    purchase_id: UUID
    entity_type: str
    entity_id: UUID
    token_cost: int
    purchased_at: datetime


class UserPurchasesResponse(BaseModel):
    purchases: list[UserPurchaseResponse]


class PracticePlanResponse(BaseModel):
    plan_id: UUID
    frequency: str
    target_sessions_per_week: int | None
    target_minutes_per_week: int | None
    grace_days: int
    effective_grace_days: int
    is_active: bool


class GoalResponse(BaseModel):
    goal_id: UUID
    title: str
    description: str | None
    goal_type: str
    target_value: int
    current_value: int
    is_active: bool
    deadline: date | None
    completed_at: datetime | None


class GoalsResponse(BaseModel):
    goals: list[GoalResponse]


class EnrollmentResponse(BaseModel):
    course_id: UUID
    newly_enrolled: bool


class CourseWithProgressResponse(BaseModel):
    course_id: UUID
    course_title: str
    course_description: str | None
    teacher_name: str | None
    total_sessions: int
    completed_sessions: int
    progress_percentage: int


class CoursesWithProgressResponse(BaseModel):
    courses: list[CourseWithProgressResponse]


class CatalogCourseResponse(BaseModel):
    course_id: UUID
    title: str
    description: str | None
    teacher_name: str | None
    token_cost: int
    session_count: int
    created_at: datetime
    has_access: bool


class CatalogCoursesResponse(BaseModel):
    courses: list[CatalogCourseResponse]
    limit: int
    offset: int


class NotificationReadResponse(BaseModel):
    notification_id: UUID
    already_read: bool
