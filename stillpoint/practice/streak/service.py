from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from stillpoint.core.config import get_settings
from stillpoint.db.models.streaks import Streak
from stillpoint.db.repo.practice_plans_repo import PracticePlansRepo
from stillpoint.db.repo.streaks_repo import StreaksRepo
from stillpoint.practice.streak.constants import STREAK_TYPES
from stillpoint.practice.streak.errors import StreakValidationError
from stillpoint.practice.streak.rules import apply_activity, resolve_grace_allowance
from stillpoint.practice.streak.types import StreakOutcome, StreakSnapshot, StreakUpdateResult

logger = structlog.get_logger("stillpoint.practice.streak")


class StreakService:
    @staticmethod
    def _snapshot_from_model(streak: Streak) -> StreakSnapshot:
        return StreakSnapshot(
            current_streak=streak.current_streak,
            longest_streak=streak.longest_streak,
            last_activity_date=streak.last_activity_date,
            grace_used=streak.grace_used,
        )

    @staticmethod
    def _apply_snapshot_to_model(streak: Streak, snapshot: StreakSnapshot, now_utc: datetime) -> None:
        streak.current_streak = snapshot.current_streak
        streak.longest_streak = snapshot.longest_streak
        streak.last_activity_date = snapshot.last_activity_date
        streak.grace_used = snapshot.grace_used
        streak.updated_at = now_utc
        streak.version += 1

    @staticmethod
    async def get_grace_allowance(session: AsyncSession, user_id: UUID) -> int:
        settings = get_settings()
        plan = await PracticePlansRepo.get_active(session, user_id)
        return resolve_grace_allowance(
            plan.grace_days if plan is not None else None,
            default_days=settings.streak_grace_days_default,
            cap_days=settings.streak_grace_days_cap,
        )

    @staticmethod
    async def update_streak(
        session: AsyncSession,
        *,
        user_id: UUID,
        streak_type: str,
        activity_date: date,
        now_utc: datetime,
    ) -> StreakUpdateResult:
        if streak_type not in STREAK_TYPES:
            raise StreakValidationError(f"unknown streak type: {streak_type!r}")

        inserted = await StreaksRepo.insert_first_activity(
            session,
            user_id=user_id,
            streak_type=streak_type,
            activity_date=activity_date,
            now_utc=now_utc,
        )
        if inserted:
            logger.info(
                "streak_started",
                user_id=str(user_id),
                streak_type=streak_type,
                activity_date=activity_date.isoformat(),
            )
            return StreakUpdateResult(
                streak_type=streak_type,
                outcome=StreakOutcome.STARTED,
                current_streak=1,
                longest_streak=1,
                grace_used=0,
                last_activity_date=activity_date,
            )

        streak = await StreaksRepo.get_for_update(session, user_id=user_id, streak_type=streak_type)
        if streak is None:
            raise RuntimeError("streak row missing after conflict-ignoring insert")

        grace_allowance = await StreakService.get_grace_allowance(session, user_id)
        snapshot = StreakService._snapshot_from_model(streak)
        updated, outcome = apply_activity(
            snapshot,
            activity_date=activity_date,
            grace_allowance=grace_allowance,
        )

        if outcome != StreakOutcome.SAME_DAY:
            StreakService._apply_snapshot_to_model(streak, updated, now_utc)
            await session.flush()

        if outcome == StreakOutcome.RESET:
            logger.info(
                "streak_reset",
                user_id=str(user_id),
                streak_type=streak_type,
                previous_streak=snapshot.current_streak,
                previous_activity_date=(
                    snapshot.last_activity_date.isoformat() if snapshot.last_activity_date else None
                ),
                activity_date=activity_date.isoformat(),
            )
        elif outcome == StreakOutcome.GRACE_APPLIED:
            logger.info(
                "streak_grace_applied",
                user_id=str(user_id),
                streak_type=streak_type,
                grace_used=updated.grace_used,
                grace_allowance=grace_allowance,
            )

        return StreakUpdateResult(
            streak_type=streak_type,
            outcome=outcome,
            current_streak=updated.current_streak,
            longest_streak=updated.longest_streak,
            grace_used=updated.grace_used,
            last_activity_date=updated.last_activity_date or activity_date,
        )
