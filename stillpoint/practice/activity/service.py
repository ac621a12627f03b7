from __future__ import annotations

from datetime import datetime, timedelta
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from stillpoint.core.time import activity_local_date, local_day_start_utc, week_start
from stillpoint.db.repo.meditation_sessions_repo import MeditationSessionsRepo
from stillpoint.practice.activity.types import ActivityKind, ActivityResult
from stillpoint.practice.badges.service import BadgeService
from stillpoint.practice.goals.service import GoalService
from stillpoint.practice.goals.types import ActivityProgress
from stillpoint.practice.streak.constants import STREAK_TYPE_OVERALL
from stillpoint.practice.streak.service import StreakService

logger = structlog.get_logger("stillpoint.practice.activity")


class ActivityService:
    @staticmethod
    async def record_completion(
        session: AsyncSession,
        *,
        user_id: UUID,
        kind: ActivityKind,
        completed_at_utc: datetime,
        minutes: int,
        now_utc: datetime,
    ) -> ActivityResult:
        """Applies streaks, goal progress and badge checks for one first-time completion.

        The completed row must already be flushed so the aggregates below include it.
        """
        activity_date = activity_local_date(completed_at_utc)
        result = ActivityResult(kind=kind)

        result.streaks.append(
            await StreakService.update_streak(
                session,
                user_id=user_id,
                streak_type=kind.value,
                activity_date=activity_date,
                now_utc=now_utc,
            )
        )
        overall = await StreakService.update_streak(
            session,
            user_id=user_id,
            streak_type=STREAK_TYPE_OVERALL,
            activity_date=activity_date,
            now_utc=now_utc,
        )
        result.streaks.append(overall)

        is_meditation = kind == ActivityKind.MEDITATION
        week_first_day = week_start(activity_date)
        weekly_sessions = await MeditationSessionsRepo.count_completed(
            session,
            user_id=user_id,
            since_utc=local_day_start_utc(week_first_day),
            until_utc=local_day_start_utc(week_first_day + timedelta(days=7)),
        )
        result.completed_goal_ids = await GoalService.apply_activity(
            session,
            user_id=user_id,
            progress=ActivityProgress(
                activity_date=activity_date,
                sessions_delta=1 if is_meditation else 0,
                minutes_delta=max(minutes, 0) if is_meditation else 0,
                overall_streak=overall.current_streak,
                weekly_sessions=weekly_sessions,
            ),
            now_utc=now_utc,
        )
        result.awarded_badges = await BadgeService.check_and_award_badges(
            session,
            user_id=user_id,
            now_utc=now_utc,
        )

        logger.info(
            "activity_recorded",
            user_id=str(user_id),
            kind=kind.value,
            activity_date=activity_date.isoformat(),
            overall_streak=overall.current_streak,
            goals_completed=len(result.completed_goal_ids),
            badges_awarded=len(result.awarded_badges),
        )
        return result
