from __future__ import annotations

from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from stillpoint.core.config import get_settings
from stillpoint.db.models.practice_plans import PracticePlan
from stillpoint.db.repo.practice_plans_repo import PracticePlansRepo
from stillpoint.practice.plans.errors import PracticePlanNotFoundError, PracticePlanValidationError
from stillpoint.practice.plans.types import PLAN_FREQUENCIES, PracticePlanView
from stillpoint.practice.streak.rules import resolve_grace_allowance

logger = structlog.get_logger("stillpoint.practice.plans")


def _validate_plan_fields(
    *,
    frequency: str,
    target_sessions_per_week: int | None,
    target_minutes_per_week: int | None,
    grace_days: int,
) -> None:
    if frequency not in PLAN_FREQUENCIES:
        raise PracticePlanValidationError(f"frequency must be one of {sorted(PLAN_FREQUENCIES)}")
    if target_sessions_per_week is not None and target_sessions_per_week <= 0:
        raise PracticePlanValidationError("target_sessions_per_week must be positive")
    if target_minutes_per_week is not None and target_minutes_per_week <= 0:
        raise PracticePlanValidationError("target_minutes_per_week must be positive")
    if grace_days < 0:
        raise PracticePlanValidationError("grace_days must not be negative")


class PracticePlanService:
    @staticmethod
    def _as_view(plan: PracticePlan) -> PracticePlanView:
        settings = get_settings()
        return PracticePlanView(
            plan_id=plan.id,
            frequency=plan.frequency,
            target_sessions_per_week=plan.target_sessions_per_week,
            target_minutes_per_week=plan.target_minutes_per_week,
            grace_days=plan.grace_days,
            effective_grace_days=resolve_grace_allowance(
                plan.grace_days,
                default_days=settings.streak_grace_days_default,
                cap_days=settings.streak_grace_days_cap,
            ),
            is_active=plan.is_active,
        )

    @staticmethod
    async def get_active_plan(session: AsyncSession, user_id: UUID) -> PracticePlanView | None:
        plan = await PracticePlansRepo.get_active(session, user_id)
        if plan is None:
            return None
        return PracticePlanService._as_view(plan)

    @staticmethod
    async def upsert_practice_plan(
        session: AsyncSession,
        *,
        user_id: UUID,
        frequency: str,
        grace_days: int,
        now_utc: datetime,
        target_sessions_per_week: int | None = None,
        target_minutes_per_week: int | None = None,
        plan_id: UUID | None = None,
    ) -> PracticePlanView:
        _validate_plan_fields(
            frequency=frequency,
            target_sessions_per_week=target_sessions_per_week,
            target_minutes_per_week=target_minutes_per_week,
            grace_days=grace_days,
        )

        if plan_id is not None:
            plan = await PracticePlansRepo.get_by_id_for_update(session, plan_id)
            if plan is None or plan.user_id != user_id:
                raise PracticePlanNotFoundError

            if not plan.is_active:
                await PracticePlansRepo.deactivate_all_for_user(session, user_id=user_id, now_utc=now_utc)
                plan.is_active = True
            plan.frequency = frequency
            plan.target_sessions_per_week = target_sessions_per_week
            plan.target_minutes_per_week = target_minutes_per_week
            plan.grace_days = grace_days
            plan.updated_at = now_utc
            await session.flush()
            logger.info("practice_plan_updated", user_id=str(user_id), plan_id=str(plan.id))
            return PracticePlanService._as_view(plan)

        deactivated = await PracticePlansRepo.deactivate_all_for_user(session, user_id=user_id, now_utc=now_utc)
        plan = await PracticePlansRepo.create(
            session,
            plan=PracticePlan(
                user_id=user_id,
                frequency=frequency,
                target_sessions_per_week=target_sessions_per_week,
                target_minutes_per_week=target_minutes_per_week,
                grace_days=grace_days,
                is_active=True,
                created_at=now_utc,
                updated_at=now_utc,
            ),
        )
        logger.info(
            "practice_plan_created",
            user_id=str(user_id),
            plan_id=str(plan.id),
            replaced_plans=deactivated,
        )
        return PracticePlanService._as_view(plan)
