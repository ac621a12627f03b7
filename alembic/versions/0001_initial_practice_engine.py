"""initial_practice_engine

Revision ID: 0001_initial_practice_engine
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "0001_initial_practice_engine"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()"))


def _updated_at() -> sa.Column:
    return sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()"))


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("full_name", sa.Text(), nullable=True),
        _created_at(),
    )

    op.create_table(
        "badges",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("icon", sa.String(64), nullable=False),
        sa.Column("category", sa.String(32), nullable=False),
        sa.Column("requirement_type", sa.String(32), nullable=False),
        sa.Column("requirement_value", sa.Integer(), nullable=True),
        sa.Column("tier", sa.String(16), nullable=True),
        _created_at(),
        sa.CheckConstraint(
            "requirement_value IS NULL OR requirement_value > 0",
            name="ck_badges_requirement_value_positive",
        ),
        sa.CheckConstraint("tier IS NULL OR tier IN ('bronze','silver','gold','platinum')", name="ck_badges_tier"),
        sa.UniqueConstraint("name", name="uq_badges_name"),
    )

    op.create_table(
        "courses",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("teacher_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("token_cost", sa.Integer(), nullable=False, server_default=sa.text("0")),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint("token_cost >= 0", name="ck_courses_token_cost_non_negative"),
    )

    op.create_table(
        "standalone_meditations",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("teacher_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("token_cost", sa.Integer(), nullable=False, server_default=sa.text("0")),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint("duration_minutes > 0", name="ck_standalone_meditations_duration_positive"),
        sa.CheckConstraint("token_cost >= 0", name="ck_standalone_meditations_token_cost_non_negative"),
    )

    op.create_table(
        "course_sessions",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("course_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=False),
        _created_at(),
        sa.CheckConstraint("duration_minutes > 0", name="ck_course_sessions_duration_positive"),
        sa.ForeignKeyConstraint(["course_id"], ["courses.id"]),
    )
    op.create_index("idx_course_sessions_course_order", "course_sessions", ["course_id", "order_index"])

    op.create_table(
        "streaks",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("streak_type", sa.String(32), nullable=False),
        sa.Column("current_streak", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("longest_streak", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("last_activity_date", sa.Date(), nullable=True),
        sa.Column("grace_used", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("0")),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint("current_streak >= 0", name="ck_streaks_current_non_negative"),
        sa.CheckConstraint("longest_streak >= current_streak", name="ck_streaks_longest_covers_current"),
        sa.CheckConstraint("grace_used >= 0", name="ck_streaks_grace_used_non_negative"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"]),
        sa.UniqueConstraint("user_id", "streak_type", name="uq_streaks_user_type"),
    )
    op.create_index("idx_streaks_last_activity", "streaks", ["last_activity_date"])

    op.create_table(
        "practice_plans",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("frequency", sa.String(16), nullable=False),
        sa.Column("target_sessions_per_week", sa.Integer(), nullable=True),
        sa.Column("target_minutes_per_week", sa.Integer(), nullable=True),
        sa.Column("grace_days", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint("frequency IN ('daily','weekly')", name="ck_practice_plans_frequency"),
        sa.CheckConstraint("grace_days >= 0", name="ck_practice_plans_grace_days_non_negative"),
        sa.CheckConstraint(
            "target_sessions_per_week IS NULL OR target_sessions_per_week > 0",
            name="ck_practice_plans_sessions_positive",
        ),
        sa.CheckConstraint(
            "target_minutes_per_week IS NULL OR target_minutes_per_week > 0",
            name="ck_practice_plans_minutes_positive",
        ),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"]),
    )
    op.create_index(
        "uq_practice_plans_active_per_user",
        "practice_plans",
        ["user_id"],
        unique=True,
        postgresql_where=sa.text("is_active"),
    )

    op.create_table(
        "goals",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("goal_type", sa.String(32), nullable=False),
        sa.Column("target_value", sa.Integer(), nullable=False),
        sa.Column("current_value", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("deadline", sa.Date(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint(
            "goal_type IN ('total_sessions','total_minutes','streak_days','weekly_sessions')",
            name="ck_goals_goal_type",
        ),
        sa.CheckConstraint("target_value > 0", name="ck_goals_target_positive"),
        sa.CheckConstraint("current_value >= 0", name="ck_goals_current_non_negative"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"]),
    )
    op.create_index("idx_goals_user_active", "goals", ["user_id", "is_active"])

    op.create_table(
        "user_badges",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("badge_id", sa.Uuid(), nullable=False),
        sa.Column("earned_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"]),
        sa.ForeignKeyConstraint(["badge_id"], ["badges.id"]),
        sa.UniqueConstraint("user_id", "badge_id", name="uq_user_badges_user_badge"),
    )
    op.create_index("idx_user_badges_user_earned", "user_badges", ["user_id", "earned_at"])

    op.create_table(
        "user_tokens",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("balance", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("0")),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint("balance >= 0", name="ck_user_tokens_balance_non_negative"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"]),
        sa.UniqueConstraint("user_id", name="uq_user_tokens_user_id"),
    )

    op.create_table(
        "token_transactions",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("transaction_type", sa.String(16), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("entity_type", sa.String(16), nullable=True),
        sa.Column("entity_id", sa.Uuid(), nullable=True),
        sa.Column("balance_after", sa.Integer(), nullable=False),
        _created_at(),
        sa.CheckConstraint("amount <> 0", name="ck_token_transactions_amount_non_zero"),
        sa.CheckConstraint("transaction_type IN ('purchase','spend')", name="ck_token_transactions_type"),
        sa.CheckConstraint(
            "(transaction_type = 'purchase' AND amount > 0) OR (transaction_type = 'spend' AND amount < 0)",
            name="ck_token_transactions_sign_matches_type",
        ),
        sa.CheckConstraint("balance_after >= 0", name="ck_token_transactions_balance_after_non_negative"),
        sa.CheckConstraint(
            "entity_type IS NULL OR entity_type IN ('course','meditation')",
            name="ck_token_transactions_entity_type",
        ),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"]),
    )
    op.create_index("idx_token_transactions_user_created", "token_transactions", ["user_id", "created_at"])
    op.create_index("idx_token_transactions_entity", "token_transactions", ["entity_type", "entity_id"])

    op.create_table(
        "user_purchases",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("entity_type", sa.String(16), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("token_cost", sa.Integer(), nullable=False),
        sa.Column("transaction_id", sa.Uuid(), nullable=True),
        sa.Column("purchased_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("entity_type IN ('course','meditation')", name="ck_user_purchases_entity_type"),
        sa.CheckConstraint("token_cost >= 0", name="ck_user_purchases_token_cost_non_negative"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"]),
        sa.ForeignKeyConstraint(["transaction_id"], ["token_transactions.id"]),
        sa.UniqueConstraint("user_id", "entity_type", "entity_id", name="uq_user_purchases_user_entity"),
    )

    op.create_table(
        "meditation_sessions",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("session_type", sa.String(32), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("interval_minutes", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("paused_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("resumed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("abandoned_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("total_minutes_meditated", sa.Integer(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint(
            "status IN ('in_progress','paused','completed','abandoned')",
            name="ck_meditation_sessions_status",
        ),
        sa.CheckConstraint("duration_minutes > 0", name="ck_meditation_sessions_duration_positive"),
        sa.CheckConstraint(
            "total_minutes_meditated IS NULL OR total_minutes_meditated >= 0",
            name="ck_meditation_sessions_total_minutes_non_negative",
        ),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"]),
        sa.UniqueConstraint("user_id", "started_at", name="uq_meditation_sessions_user_started"),
    )
    op.create_index("idx_meditation_sessions_user_status", "meditation_sessions", ["user_id", "status"])
    op.create_index("idx_meditation_sessions_user_completed", "meditation_sessions", ["user_id", "completed_at"])

    op.create_table(
        "breathing_sessions",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("pattern_name", sa.String(120), nullable=False),
        sa.Column("inhale_seconds", sa.Integer(), nullable=False),
        sa.Column("hold_seconds", sa.Integer(), nullable=False),
        sa.Column("exhale_seconds", sa.Integer(), nullable=False),
        sa.Column("rounds_completed", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("total_duration_seconds", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.CheckConstraint("inhale_seconds > 0", name="ck_breathing_sessions_inhale_positive"),
        sa.CheckConstraint("hold_seconds >= 0", name="ck_breathing_sessions_hold_non_negative"),
        sa.CheckConstraint("exhale_seconds > 0", name="ck_breathing_sessions_exhale_positive"),
        sa.CheckConstraint("rounds_completed >= 0", name="ck_breathing_sessions_rounds_non_negative"),
        sa.CheckConstraint("total_duration_seconds >= 0", name="ck_breathing_sessions_duration_non_negative"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"]),
    )
    op.create_index("idx_breathing_sessions_user_completed", "breathing_sessions", ["user_id", "completed_at"])

    op.create_table(
        "course_enrollments",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("course_id", sa.Uuid(), nullable=False),
        sa.Column("enrolled_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"]),
        sa.ForeignKeyConstraint(["course_id"], ["courses.id"]),
        sa.UniqueConstraint("user_id", "course_id", name="uq_course_enrollments_user_course"),
    )

    op.create_table(
        "course_progress",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("course_session_id", sa.Uuid(), nullable=False),
        sa.Column("last_position_seconds", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint("last_position_seconds >= 0", name="ck_course_progress_position_non_negative"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"]),
        sa.ForeignKeyConstraint(["course_session_id"], ["course_sessions.id"]),
        sa.UniqueConstraint("user_id", "course_session_id", name="uq_course_progress_user_session"),
    )
    op.create_index("idx_course_progress_user_completed", "course_progress", ["user_id", "completed_at"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("notification_type", sa.String(32), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"]),
    )
    op.create_index("idx_notifications_user_read", "notifications", ["user_id", "is_read"])

    op.create_table(
        "outbox_events",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("event_type", sa.String(64), nullable=False),
        sa.Column("payload", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        _created_at(),
    )
    op.create_index("idx_outbox_events_status_created", "outbox_events", ["status", "created_at"])

    op.create_table(
        "reconciliation_runs",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("scope", sa.String(8), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("finished_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(8), nullable=False),
        sa.Column("accounts_checked", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("diff_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.CheckConstraint("scope IN ('all','user')", name="ck_reconciliation_runs_scope"),
        sa.CheckConstraint("status IN ('OK','DIFF')", name="ck_reconciliation_runs_status"),
        sa.CheckConstraint(
            "(scope = 'user' AND user_id IS NOT NULL) OR (scope = 'all' AND user_id IS NULL)",
            name="ck_reconciliation_runs_user_matches_scope",
        ),
    )
    op.create_index("idx_reconciliation_runs_scope_started", "reconciliation_runs", ["scope", "started_at"])

    op.execute(
        """
        CREATE OR REPLACE FUNCTION fn_token_transactions_append_only()
        RETURNS trigger
        LANGUAGE plpgsql
        AS $$
        BEGIN
            RAISE EXCEPTION 'token_transactions is append-only';
        END;
        $$;
        """
    )
    op.execute(
        """
        CREATE TRIGGER trg_token_transactions_append_only
        BEFORE UPDATE OR DELETE ON token_transactions
        FOR EACH ROW
        EXECUTE FUNCTION fn_token_transactions_append_only();
        """
    )


def downgrade() -> None:
    op.execute("DROP TRIGGER IF EXISTS trg_token_transactions_append_only ON token_transactions;")
    op.execute("DROP FUNCTION IF EXISTS fn_token_transactions_append_only();")

    op.drop_index("idx_reconciliation_runs_scope_started", table_name="reconciliation_runs")
    op.drop_table("reconciliation_runs")
    op.drop_index("idx_outbox_events_status_created", table_name="outbox_events")
    op.drop_table("outbox_events")
    op.drop_index("idx_notifications_user_read", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("idx_course_progress_user_completed", table_name="course_progress")
    op.drop_table("course_progress")
    op.drop_table("course_enrollments")
    op.drop_index("idx_breathing_sessions_user_completed", table_name="breathing_sessions")
    op.drop_table("breathing_sessions")
    op.drop_index("idx_meditation_sessions_user_completed", table_name="meditation_sessions")
    op.drop_index("idx_meditation_sessions_user_status", table_name="meditation_sessions")
    op.drop_table("meditation_sessions")
    op.drop_table("user_purchases")
    op.drop_index("idx_token_transactions_entity", table_name="token_transactions")
    op.drop_index("idx_token_transactions_user_created", table_name="token_transactions")
    op.drop_table("token_transactions")
    op.drop_table("user_tokens")
    op.drop_index("idx_user_badges_user_earned", table_name="user_badges")
    op.drop_table("user_badges")
    op.drop_index("idx_goals_user_active", table_name="goals")
    op.drop_table("goals")
    op.drop_index("uq_practice_plans_active_per_user", table_name="practice_plans")
    op.drop_table("practice_plans")
    op.drop_index("idx_streaks_last_activity", table_name="streaks")
    op.drop_table("streaks")
    op.drop_index("idx_course_sessions_course_order", table_name="course_sessions")
    op.drop_table("course_sessions")
    op.drop_table("standalone_meditations")
    op.drop_table("courses")
    op.drop_table("badges")
    op.drop_table("profiles")
