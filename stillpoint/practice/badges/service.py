from __future__ import annotations

from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from stillpoint.db.models.badges import Badge
from stillpoint.db.repo.badges_repo import BadgesRepo
from stillpoint.db.repo.breathing_sessions_repo import BreathingSessionsRepo
from stillpoint.db.repo.content_repo import ContentRepo
from stillpoint.db.repo.meditation_sessions_repo import MeditationSessionsRepo
from stillpoint.db.repo.streaks_repo import StreaksRepo
from stillpoint.practice.badges.rules import select_new_badges
from stillpoint.practice.badges.types import AwardedBadge, BadgeRule, UserStats
from stillpoint.practice.notifications.service import NotificationService

logger = structlog.get_logger("stillpoint.practice.badges")


class BadgeService:
    @staticmethod
    def _rule_from_model(badge: Badge) -> BadgeRule:
        return BadgeRule(
            badge_id=badge.id,
            name=badge.name,
            requirement_type=badge.requirement_type,
            requirement_value=badge.requirement_value,
        )

    @staticmethod
    async def load_user_stats(session: AsyncSession, user_id: UUID) -> UserStats:
        return UserStats(
            total_sessions=await MeditationSessionsRepo.count_completed(session, user_id=user_id),
            total_minutes=await MeditationSessionsRepo.sum_completed_minutes(session, user_id=user_id),
            longest_streak=await StreaksRepo.get_max_longest_streak(session, user_id),
            breathing_sessions=await BreathingSessionsRepo.count_completed(session, user_id),
            courses_completed=await ContentRepo.count_completed_course_sessions(session, user_id),
        )

    @staticmethod
    async def check_and_award_badges(
        session: AsyncSession,
        *,
        user_id: UUID,
        now_utc: datetime,
    ) -> list[AwardedBadge]:
        catalog = await BadgesRepo.list_catalog(session)
        if not catalog:
            return []

        stats = await BadgeService.load_user_stats(session, user_id)
        earned_badge_ids = await BadgesRepo.list_earned_badge_ids(session, user_id)
        candidates = select_new_badges(
            [BadgeService._rule_from_model(badge) for badge in catalog],
            stats=stats,
            earned_badge_ids=earned_badge_ids,
        )

        badges_by_id = {badge.id: badge for badge in catalog}
        awarded: list[AwardedBadge] = []
        for rule in candidates:
            inserted = await BadgesRepo.insert_user_badge_if_missing(
                session,
                user_id=user_id,
                badge_id=rule.badge_id,
                earned_at=now_utc,
            )
            if not inserted:
                continue

            badge = badges_by_id[rule.badge_id]
            await NotificationService.create_badge_earned(
                session,
                user_id=user_id,
                badge_name=badge.name,
                badge_description=badge.description,
                now_utc=now_utc,
            )
            awarded.append(AwardedBadge(badge_id=rule.badge_id, name=rule.name, earned_at=now_utc))
            logger.info(
                "badge_awarded",
                user_id=str(user_id),
                badge_id=str(rule.badge_id),
                badge_name=rule.name,
                requirement_type=rule.requirement_type,
                requirement_value=rule.requirement_value,
            )
        return awarded
