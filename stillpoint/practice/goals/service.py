from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from stillpoint.db.models.goals import Goal
from stillpoint.db.repo.goals_repo import GoalsRepo
from stillpoint.practice.goals.errors import GoalNotFoundError, GoalValidationError
from stillpoint.practice.goals.rules import apply_progress, complete_if_reached
from stillpoint.practice.goals.types import ActivityProgress, GoalSnapshot, GoalType, GoalView

logger = structlog.get_logger("stillpoint.practice.goals")

MAX_TITLE_LENGTH = 200


def _clean_title(title: str | None) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise GoalValidationError("title must not be empty")
    if len(cleaned) > MAX_TITLE_LENGTH:
        raise GoalValidationError(f"title must be at most {MAX_TITLE_LENGTH} characters")
    return cleaned


def _parse_goal_type(goal_type: str) -> GoalType:
    try:
        return GoalType(goal_type)
    except ValueError as exc:
        raise GoalValidationError(f"unknown goal type: {goal_type!r}") from exc


def _validate_target(target_value: int) -> None:
    if target_value <= 0:
        raise GoalValidationError("target_value must be positive")


class GoalService:
    @staticmethod
    def _snapshot_from_model(goal: Goal) -> GoalSnapshot:
        return GoalSnapshot(
            goal_type=GoalType(goal.goal_type),
            target_value=goal.target_value,
            current_value=goal.current_value,
            is_active=goal.is_active,
            deadline=goal.deadline,
            completed_at=goal.completed_at,
        )

    @staticmethod
    def _apply_snapshot_to_model(goal: Goal, snapshot: GoalSnapshot, now_utc: datetime) -> None:
        goal.current_value = snapshot.current_value
        goal.is_active = snapshot.is_active
        goal.completed_at = snapshot.completed_at
        goal.updated_at = now_utc

    @staticmethod
    def _as_view(goal: Goal) -> GoalView:
        return GoalView(
            goal_id=goal.id,
            title=goal.title,
            description=goal.description,
            goal_type=goal.goal_type,
            target_value=goal.target_value,
            current_value=goal.current_value,
            is_active=goal.is_active,
            deadline=goal.deadline,
            completed_at=goal.completed_at,
        )

    @staticmethod
    async def _get_owned_goal_for_update(session: AsyncSession, *, user_id: UUID, goal_id: UUID) -> Goal:
        goal = await GoalsRepo.get_by_id_for_update(session, goal_id)
        if goal is None or goal.user_id != user_id:
            raise GoalNotFoundError
        return goal

    @staticmethod
    async def create_goal(
        session: AsyncSession,
        *,
        user_id: UUID,
        title: str,
        goal_type: str,
        target_value: int,
        now_utc: datetime,
        description: str | None = None,
        deadline: date | None = None,
    ) -> GoalView:
        cleaned_title = _clean_title(title)
        parsed_type = _parse_goal_type(goal_type)
        _validate_target(target_value)

        goal = await GoalsRepo.create(
            session,
            goal=Goal(
                user_id=user_id,
                title=cleaned_title,
                description=description,
                goal_type=parsed_type.value,
                target_value=target_value,
                current_value=0,
                is_active=True,
                deadline=deadline,
                completed_at=None,
                created_at=now_utc,
                updated_at=now_utc,
            ),
        )
        logger.info(
            "goal_created",
            user_id=str(user_id),
            goal_id=str(goal.id),
            goal_type=parsed_type.value,
            target_value=target_value,
        )
        return GoalService._as_view(goal)

    @staticmethod
    async def update_goal(
        session: AsyncSession,
        *,
        user_id: UUID,
        goal_id: UUID,
        now_utc: datetime,
        title: str | None = None,
        description: str | None = None,
        target_value: int | None = None,
        deadline: date | None = None,
    ) -> GoalView:
        goal = await GoalService._get_owned_goal_for_update(session, user_id=user_id, goal_id=goal_id)
        if not goal.is_active:
            raise GoalValidationError("only active goals can be updated")

        if title is not None:
            goal.title = _clean_title(title)
        if description is not None:
            goal.description = description
        if deadline is not None:
            goal.deadline = deadline
        if target_value is not None:
            _validate_target(target_value)
            goal.target_value = target_value

        snapshot, completed = complete_if_reached(GoalService._snapshot_from_model(goal), now_utc=now_utc)
        GoalService._apply_snapshot_to_model(goal, snapshot, now_utc)
        await session.flush()
        if completed:
            logger.info("goal_completed", user_id=str(user_id), goal_id=str(goal.id))
        return GoalService._as_view(goal)

    @staticmethod
    async def cancel_goal(
        session: AsyncSession,
        *,
        user_id: UUID,
        goal_id: UUID,
        now_utc: datetime,
    ) -> GoalView:
        goal = await GoalService._get_owned_goal_for_update(session, user_id=user_id, goal_id=goal_id)
        if goal.is_active:
            goal.is_active = False
            goal.updated_at = now_utc
            await session.flush()
            logger.info("goal_cancelled", user_id=str(user_id), goal_id=str(goal.id))
        return GoalService._as_view(goal)

    @staticmethod
    async def list_active_goals(session: AsyncSession, user_id: UUID) -> list[GoalView]:
        goals = await GoalsRepo.list_active(session, user_id)
        return [GoalService._as_view(goal) for goal in goals]

    @staticmethod
    async def apply_activity(
        session: AsyncSession,
        *,
        user_id: UUID,
        progress: ActivityProgress,
        now_utc: datetime,
    ) -> list[UUID]:
        completed_goal_ids: list[UUID] = []
        goals = await GoalsRepo.list_active_for_update(session, user_id)
        for goal in goals:
            snapshot = GoalService._snapshot_from_model(goal)
            updated, completed = apply_progress(snapshot, progress=progress, now_utc=now_utc)
            if updated == snapshot:
                continue
            GoalService._apply_snapshot_to_model(goal, updated, now_utc)
            if completed:
                completed_goal_ids.append(goal.id)
                logger.info(
                    "goal_completed",
                    user_id=str(user_id),
                    goal_id=str(goal.id),
                    goal_type=goal.goal_type,
                    target_value=goal.target_value,
                )
        await session.flush()
        return completed_goal_ids
