from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from stillpoint.core.time import activity_local_date, local_day_start_utc, month_start, week_start
from stillpoint.db.repo.badges_repo import BadgesRepo
from stillpoint.db.repo.breathing_sessions_repo import BreathingSessionsRepo
from stillpoint.db.repo.content_repo import ContentRepo
from stillpoint.db.repo.goals_repo import GoalsRepo
from stillpoint.db.repo.meditation_sessions_repo import MeditationSessionsRepo
from stillpoint.db.repo.notifications_repo import NotificationsRepo
from stillpoint.db.repo.streaks_repo import StreaksRepo
from stillpoint.db.repo.token_accounts_repo import TokenAccountsRepo
from stillpoint.practice.streak.constants import STREAK_TYPE_OVERALL
from stillpoint.stats.types import DashboardSummary, PeriodTotals, ProgressStats


class StatsService:
    @staticmethod
    async def _period_totals(session: AsyncSession, *, user_id: UUID, since_utc: datetime) -> PeriodTotals:
        return PeriodTotals(
            sessions=await MeditationSessionsRepo.count_completed(session, user_id=user_id, since_utc=since_utc),
            minutes=await MeditationSessionsRepo.sum_completed_minutes(
                session,
                user_id=user_id,
                since_utc=since_utc,
            ),
        )

    @staticmethod
    async def get_dashboard_summary(session: AsyncSession, *, user_id: UUID) -> DashboardSummary:
        return DashboardSummary(
            total_sessions=await MeditationSessionsRepo.count_completed(session, user_id=user_id),
            total_minutes=await MeditationSessionsRepo.sum_completed_minutes(session, user_id=user_id),
            current_streak=await StreaksRepo.get_current_streak(
                session,
                user_id=user_id,
                streak_type=STREAK_TYPE_OVERALL,
            ),
            token_balance=await TokenAccountsRepo.get_balance(session, user_id),
            active_goals=await GoalsRepo.count_active(session, user_id),
            unread_notifications=await NotificationsRepo.count_unread(session, user_id),
            enrolled_courses=await ContentRepo.count_enrollments(session, user_id),
        )

    @staticmethod
    async def get_progress_stats(
        session: AsyncSession,
        *,
        user_id: UUID,
        now_utc: datetime,
    ) -> ProgressStats:
        today = activity_local_date(now_utc)
        return ProgressStats(
            weekly=await StatsService._period_totals(
                session,
                user_id=user_id,
                since_utc=local_day_start_utc(week_start(today)),
            ),
            monthly=await StatsService._period_totals(
                session,
                user_id=user_id,
                since_utc=local_day_start_utc(month_start(today)),
            ),
            breathing_sessions=await BreathingSessionsRepo.count_completed(session, user_id),
            courses_completed=await ContentRepo.count_completed_course_sessions(session, user_id),
            badges_earned=await BadgesRepo.count_user_badges(session, user_id),
            longest_streak=await StreaksRepo.get_max_longest_streak(session, user_id),
        )
