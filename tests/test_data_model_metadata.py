from __future__ import annotations

from sqlalchemy import CheckConstraint, UniqueConstraint

from stillpoint.db import models  # noqa: F401
from stillpoint.db.models.base import Base


def _check_names(table_name: str) -> set[str]:
    table = Base.metadata.tables[table_name]
    return {constraint.name for constraint in table.constraints if isinstance(constraint, CheckConstraint)}


def _unique_names(table_name: str) -> set[str]:
    table = Base.metadata.tables[table_name]
    return {constraint.name for constraint in table.constraints if isinstance(constraint, UniqueConstraint)}


def _index_names(table_name: str) -> set[str]:
    return {index.name for index in Base.metadata.tables[table_name].indexes}


def test_all_tables_registered() -> None:
    expected_tables = {
        "profiles",
        "courses",
        "course_sessions",
        "course_enrollments",
        "course_progress",
        "standalone_meditations",
        "meditation_sessions",
        "breathing_sessions",
        "streaks",
        "practice_plans",
        "goals",
        "badges",
        "user_badges",
        "user_tokens",
        "token_transactions",
        "user_purchases",
        "notifications",
        "outbox_events",
        "reconciliation_runs",
    }
    assert expected_tables == set(Base.metadata.tables)


def test_critical_constraints_present() -> None:
    assert "ck_user_tokens_balance_non_negative" in _check_names("user_tokens")
    assert {
        "ck_token_transactions_amount_non_zero",
        "ck_token_transactions_sign_matches_type",
        "ck_token_transactions_balance_after_non_negative",
    }.issubset(_check_names("token_transactions"))
    assert "idx_token_transactions_user_created" in _index_names("token_transactions")

    assert "uq_user_purchases_user_entity" in _unique_names("user_purchases")
    assert "uq_streaks_user_type" in _unique_names("streaks")
    assert "ck_streaks_longest_covers_current" in _check_names("streaks")
    assert "uq_user_badges_user_badge" in _unique_names("user_badges")
    assert "uq_course_progress_user_session" in _unique_names("course_progress")
    assert "uq_course_enrollments_user_course" in _unique_names("course_enrollments")

    assert "uq_meditation_sessions_user_started" in _unique_names("meditation_sessions")
    assert "ck_meditation_sessions_status" in _check_names("meditation_sessions")

    assert "uq_practice_plans_active_per_user" in _index_names("practice_plans")
    assert "idx_outbox_events_status_created" in _index_names("outbox_events")
    assert "ck_reconciliation_runs_user_matches_scope" in _check_names("reconciliation_runs")
