from __future__ import annotations

from uuid import uuid4

import pytest

from stillpoint.db.models.content import Course
from stillpoint.economy.content.errors import ContentNotFoundError, ContentValidationError, InvalidContentTypeError
from stillpoint.economy.content.service import ContentService, progress_percentage
from stillpoint.economy.tokens.errors import InsufficientTokensError
from stillpoint.economy.tokens.service import TokenLedgerService
from stillpoint.practice.sessions.course_progress import CourseProgressService
from tests.practice_fixtures import NOW, create_course, create_meditation, create_profile


async def _fund(session_factory, user_id, amount: int) -> None:
    async with session_factory.begin() as session:
        await TokenLedgerService.purchase_tokens(
            session, user_id=user_id, amount=amount, payment_method="card", now_utc=NOW
        )


async def _purchase(session_factory, user_id, entity_type: str, entity_id, token_cost: int):
    async with session_factory.begin() as session:
        return await ContentService.purchase_content(
            session,
            user_id=user_id,
            entity_type=entity_type,
            entity_id=entity_id,
            token_cost=token_cost,
            now_utc=NOW,
        )


@pytest.mark.asyncio
async def test_purchase_content_charges_once(session_factory) -> None:
    user_id = await create_profile(session_factory)
    teacher_id = await create_profile(session_factory)
    course_id, _ = await create_course(session_factory, teacher_id=teacher_id, token_cost=20)
    await _fund(session_factory, user_id, 20)

    first = await _purchase(session_factory, user_id, "course", course_id, 20)
    second = await _purchase(session_factory, user_id, "course", course_id, 20)

    assert first.new_balance == 0
    assert first.idempotent_replay is False
    assert first.transaction_id is not None
    assert second.idempotent_replay is True
    assert second.new_balance == 0
    assert second.transaction_id == first.transaction_id

    async with session_factory() as session:
        purchases = await ContentService.list_user_purchases(session, user_id)
        transactions = await TokenLedgerService.list_transactions(session, user_id=user_id)
        allowed = await ContentService.has_access(
            session, user_id=user_id, entity_type="course", entity_id=course_id, price_tokens=20
        )

    assert len(purchases) == 1
    assert [transaction.amount for transaction in transactions].count(-20) == 1
    assert allowed is True


@pytest.mark.asyncio
async def test_purchase_content_without_funds_grants_nothing(session_factory) -> None:
    user_id = await create_profile(session_factory)
    teacher_id = await create_profile(session_factory)
    meditation_id = await create_meditation(session_factory, teacher_id=teacher_id, token_cost=20)
    await _fund(session_factory, user_id, 5)

    with pytest.raises(InsufficientTokensError):
        await _purchase(session_factory, user_id, "meditation", meditation_id, 20)

    async with session_factory() as session:
        purchases = await ContentService.list_user_purchases(session, user_id)
        balance = await TokenLedgerService.get_balance(session, user_id)
    assert purchases == []
    assert balance == 5


@pytest.mark.asyncio
async def test_free_content_records_entitlement_without_ledger_row(session_factory) -> None:
    user_id = await create_profile(session_factory)
    teacher_id = await create_profile(session_factory)
    meditation_id = await create_meditation(session_factory, teacher_id=teacher_id, token_cost=0)

    result = await _purchase(session_factory, user_id, "meditation", meditation_id, 0)

    assert result.transaction_id is None
    assert result.event is None
    async with session_factory() as session:
        assert await TokenLedgerService.list_transactions(session, user_id=user_id) == []
        assert await ContentService.has_access(
            session, user_id=user_id, entity_type="meditation", entity_id=meditation_id, price_tokens=0
        )


@pytest.mark.asyncio
async def test_free_content_repeat_purchase_without_token_account_is_replay(session_factory) -> None:
    user_id = await create_profile(session_factory)
    teacher_id = await create_profile(session_factory)
    meditation_id = await create_meditation(session_factory, teacher_id=teacher_id, token_cost=0)

    first = await _purchase(session_factory, user_id, "meditation", meditation_id, 0)
    second = await _purchase(session_factory, user_id, "meditation", meditation_id, 0)

    assert first.idempotent_replay is False
    assert second.idempotent_replay is True
    assert second.new_balance == 0
    async with session_factory() as session:
        purchases = await ContentService.list_user_purchases(session, user_id)
    assert len(purchases) == 1
    assert purchases[0].transaction_id is None


@pytest.mark.asyncio
async def test_paid_purchase_row_points_at_spend_transaction(session_factory) -> None:
    user_id = await create_profile(session_factory)
    teacher_id = await create_profile(session_factory)
    meditation_id = await create_meditation(session_factory, teacher_id=teacher_id, token_cost=15)
    await _fund(session_factory, user_id, 15)

    result = await _purchase(session_factory, user_id, "meditation", meditation_id, 15)

    async with session_factory() as session:
        purchases = await ContentService.list_user_purchases(session, user_id)
    assert [purchase.transaction_id for purchase in purchases] == [result.transaction_id]
    assert purchases[0].token_cost == 15


@pytest.mark.asyncio
async def test_purchase_content_validates_target(session_factory) -> None:
    user_id = await create_profile(session_factory)

    with pytest.raises(InvalidContentTypeError):
        await _purchase(session_factory, user_id, "podcast", uuid4(), 5)
    with pytest.raises(ContentNotFoundError):
        await _purchase(session_factory, user_id, "course", uuid4(), 5)


@pytest.mark.asyncio
async def test_has_access_requires_purchase_for_paid_content(session_factory) -> None:
    user_id = await create_profile(session_factory)

    async with session_factory() as session:
        allowed = await ContentService.has_access(
            session, user_id=user_id, entity_type="course", entity_id=uuid4(), price_tokens=15
        )
    assert allowed is False


@pytest.mark.asyncio
async def test_enrollment_and_course_progress_listing(session_factory) -> None:
    user_id = await create_profile(session_factory)
    teacher_id = await create_profile(session_factory, full_name="Ada Calm")
    course_id, course_session_ids = await create_course(session_factory, teacher_id=teacher_id, session_count=3)

    async with session_factory.begin() as session:
        first = await ContentService.enroll_in_course(session, user_id=user_id, course_id=course_id, now_utc=NOW)
    async with session_factory.begin() as session:
        second = await ContentService.enroll_in_course(session, user_id=user_id, course_id=course_id, now_utc=NOW)
        await CourseProgressService.update_progress(
            session,
            user_id=user_id,
            course_session_id=course_session_ids[0],
            position_seconds=600,
            completed=True,
            now_utc=NOW,
        )

    async with session_factory() as session:
        courses = await ContentService.get_user_courses_with_progress(session, user_id)

    assert (first, second) == (True, False)
    assert len(courses) == 1
    assert courses[0].course_id == course_id
    assert courses[0].teacher_name == "Ada Calm"
    assert courses[0].total_sessions == 3
    assert courses[0].completed_sessions == 1
    assert courses[0].progress_percentage == 33


@pytest.mark.asyncio
async def test_enroll_in_missing_course_raises(session_factory) -> None:
    user_id = await create_profile(session_factory)

    with pytest.raises(ContentNotFoundError):
        async with session_factory.begin() as session:
            await ContentService.enroll_in_course(session, user_id=user_id, course_id=uuid4(), now_utc=NOW)


def test_progress_percentage_handles_empty_and_overfull_courses() -> None:
    assert progress_percentage(completed_sessions=0, total_sessions=0) == 0
    assert progress_percentage(completed_sessions=2, total_sessions=3) == 67
    assert progress_percentage(completed_sessions=5, total_sessions=4) == 100


@pytest.mark.asyncio
async def test_list_courses_pages_published_catalog_with_access_flags(session_factory) -> None:
    user_id = await create_profile(session_factory)
    teacher_id = await create_profile(session_factory, full_name="Ada Calm")
    paid_id, _ = await create_course(session_factory, teacher_id=teacher_id, title="Paid", token_cost=10)
    owned_id, _ = await create_course(session_factory, teacher_id=teacher_id, title="Owned", token_cost=10)
    free_id, _ = await create_course(
        session_factory, teacher_id=teacher_id, title="Free", token_cost=0, session_count=2
    )
    draft_id, _ = await create_course(session_factory, teacher_id=teacher_id, title="Draft")
    async with session_factory.begin() as session:
        draft = await session.get(Course, draft_id)
        draft.is_published = False
    await _fund(session_factory, user_id, 10)
    await _purchase(session_factory, user_id, "course", owned_id, 10)

    async with session_factory() as session:
        first_page = await ContentService.list_courses(session, user_id=user_id, limit=2, offset=0)
        second_page = await ContentService.list_courses(session, user_id=user_id, limit=2, offset=2)

    listed = {course.course_id: course for course in first_page + second_page}
    assert len(first_page) == 2
    assert len(second_page) == 1
    assert set(listed) == {paid_id, owned_id, free_id}
    assert listed[paid_id].has_access is False
    assert listed[owned_id].has_access is True
    assert listed[free_id].has_access is True
    assert listed[free_id].session_count == 2
    assert listed[paid_id].teacher_name == "Ada Calm"


@pytest.mark.asyncio
@pytest.mark.parametrize(("limit", "offset"), [(0, 0), (101, 0), (20, -1)])
async def test_list_courses_rejects_bad_paging(session_factory, limit: int, offset: int) -> None:
    user_id = await create_profile(session_factory)

    with pytest.raises(ContentValidationError):
        async with session_factory() as session:
            await ContentService.list_courses(session, user_id=user_id, limit=limit, offset=offset)
