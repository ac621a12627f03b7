from __future__ import annotations

from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from stillpoint.db.repo.content_repo import ContentRepo
from stillpoint.db.repo.token_accounts_repo import TokenAccountsRepo
from stillpoint.db.repo.user_purchases_repo import UserPurchasesRepo
from stillpoint.economy.content.errors import (
    ContentNotFoundError,
    ContentValidationError,
    InvalidContentTypeError,
)
from stillpoint.economy.content.types import (
    CatalogCourse,
    ContentPurchaseResult,
    CourseWithProgress,
    UserPurchaseView,
)
from stillpoint.economy.tokens.service import TokenLedgerService
from stillpoint.economy.tokens.types import ENTITY_TYPES

logger = structlog.get_logger("stillpoint.economy.content")

MAX_CATALOG_PAGE = 100


def _validate_entity_type(entity_type: str) -> None:
    if entity_type not in ENTITY_TYPES:
        raise InvalidContentTypeError(f"entity_type must be one of {sorted(ENTITY_TYPES)}")


def _validate_price(price_tokens: int) -> None:
    if price_tokens < 0:
        raise ContentValidationError("token cost must not be negative")


def progress_percentage(*, completed_sessions: int, total_sessions: int) -> int:
    if total_sessions <= 0:
        return 0
    return round(min(completed_sessions, total_sessions) * 100 / total_sessions)


class ContentService:
    @staticmethod
    async def _ensure_entity_exists(session: AsyncSession, *, entity_type: str, entity_id: UUID) -> None:
        if entity_type == "course":
            entity = await ContentRepo.get_course(session, entity_id)
        else:
            entity = await ContentRepo.get_meditation(session, entity_id)
        if entity is None:
            raise ContentNotFoundError

    @staticmethod
    async def has_access(
        session: AsyncSession,
        *,
        user_id: UUID,
        entity_type: str,
        entity_id: UUID,
        price_tokens: int,
    ) -> bool:
        _validate_entity_type(entity_type)
        _validate_price(price_tokens)
        if price_tokens == 0:
            return True
        purchase = await UserPurchasesRepo.get_for_entity(
            session,
            user_id=user_id,
            entity_type=entity_type,
            entity_id=entity_id,
        )
        return purchase is not None

    @staticmethod
    async def purchase_content(
        session: AsyncSession,
        *,
        user_id: UUID,
        entity_type: str,
        entity_id: UUID,
        token_cost: int,
        now_utc: datetime,
    ) -> ContentPurchaseResult:
        _validate_entity_type(entity_type)
        _validate_price(token_cost)
        await ContentService._ensure_entity_exists(session, entity_type=entity_type, entity_id=entity_id)

        account = await TokenAccountsRepo.get_by_user_id_for_update(session, user_id)
        current_balance = account.balance if account is not None else 0

        # Concurrent buyers of the same entity wait on this insert; a rejected spend rolls it back.
        purchase_id = await UserPurchasesRepo.claim(
            session,
            user_id=user_id,
            entity_type=entity_type,
            entity_id=entity_id,
            token_cost=token_cost,
            purchased_at=now_utc,
        )
        if purchase_id is None:
            existing = await UserPurchasesRepo.get_for_entity(
                session,
                user_id=user_id,
                entity_type=entity_type,
                entity_id=entity_id,
            )
            return ContentPurchaseResult(
                entity_type=entity_type,
                entity_id=entity_id,
                new_balance=current_balance,
                idempotent_replay=True,
                transaction_id=existing.transaction_id if existing is not None else None,
            )

        result = ContentPurchaseResult(
            entity_type=entity_type,
            entity_id=entity_id,
            new_balance=current_balance,
            idempotent_replay=False,
        )
        if token_cost > 0:
            spend = await TokenLedgerService.spend_tokens(
                session,
                user_id=user_id,
                amount=token_cost,
                description=f"Purchased {entity_type} {entity_id}",
                now_utc=now_utc,
                entity_type=entity_type,
                entity_id=entity_id,
            )
            result.new_balance = spend.new_balance
            result.transaction_id = spend.transaction_id
            result.event = spend.event
            await UserPurchasesRepo.attach_transaction(
                session,
                purchase_id=purchase_id,
                transaction_id=spend.transaction_id,
            )

        logger.info(
            "content_purchased",
            user_id=str(user_id),
            entity_type=entity_type,
            entity_id=str(entity_id),
            token_cost=token_cost,
            new_balance=result.new_balance,
        )
        return result

    @staticmethod
    async def list_user_purchases(session: AsyncSession, user_id: UUID) -> list[UserPurchaseView]:
        purchases = await UserPurchasesRepo.list_for_user(session, user_id)
        return [
            UserPurchaseView(
                purchase_id=purchase.id,
                entity_type=purchase.entity_type,
                entity_id=purchase.entity_id,
                token_cost=purchase.token_cost,
                transaction_id=purchase.transaction_id,
                purchased_at=purchase.purchased_at,
            )
            for purchase in purchases
        ]

    @staticmethod
    async def enroll_in_course(
        session: AsyncSession,
        *,
        user_id: UUID,
        course_id: UUID,
        now_utc: datetime,
    ) -> bool:
        """Returns True when a new enrollment row was written."""
        course = await ContentRepo.get_course(session, course_id)
        if course is None:
            raise ContentNotFoundError

        enrolled = await ContentRepo.enroll_if_missing(
            session,
            user_id=user_id,
            course_id=course_id,
            now_utc=now_utc,
        )
        if enrolled:
            logger.info("course_enrolled", user_id=str(user_id), course_id=str(course_id))
        return enrolled

    @staticmethod
    async def get_user_courses_with_progress(
        session: AsyncSession,
        user_id: UUID,
    ) -> list[CourseWithProgress]:
        rows = await ContentRepo.list_enrolled_courses_with_progress(session, user_id)
        return [
            CourseWithProgress(
                course_id=row.course_id,
                course_title=row.course_title,
                course_description=row.course_description,
                teacher_name=row.teacher_name,
                total_sessions=row.total_sessions,
                completed_sessions=row.completed_sessions,
                progress_percentage=progress_percentage(
                    completed_sessions=row.completed_sessions,
                    total_sessions=row.total_sessions,
                ),
            )
            for row in rows
        ]

    @staticmethod
    async def list_courses(
        session: AsyncSession,
        *,
        user_id: UUID,
        limit: int = 20,
        offset: int = 0,
    ) -> list[CatalogCourse]:
        """Published courses, newest first; free courses count as accessible without a purchase."""
        if limit <= 0 or limit > MAX_CATALOG_PAGE:
            raise ContentValidationError(f"limit must be between 1 and {MAX_CATALOG_PAGE}")
        if offset < 0:
            raise ContentValidationError("offset must not be negative")

        rows = await ContentRepo.list_published_courses(session, user_id=user_id, limit=limit, offset=offset)
        return [
            CatalogCourse(
                course_id=row.course_id,
                title=row.title,
                description=row.description,
                teacher_name=row.teacher_name,
                token_cost=row.token_cost,
                session_count=row.session_count,
                created_at=row.created_at,
                has_access=row.token_cost == 0 or row.purchased,
            )
            for row in rows
        ]
