from __future__ import annotations

from uuid import UUID

from stillpoint.practice.badges.types import (
    REQUIREMENT_BREATHING_SESSIONS,
    REQUIREMENT_COURSES_COMPLETED,
    REQUIREMENT_STREAK_DAYS,
    REQUIREMENT_TOTAL_MINUTES,
    REQUIREMENT_TOTAL_SESSIONS,
    BadgeRule,
    UserStats,
)


def stat_for_requirement(stats: UserStats, requirement_type: str) -> int | None:
    if requirement_type == REQUIREMENT_TOTAL_SESSIONS:
        return stats.total_sessions
    if requirement_type == REQUIREMENT_TOTAL_MINUTES:
        return stats.total_minutes
    if requirement_type == REQUIREMENT_STREAK_DAYS:
        return stats.longest_streak
    if requirement_type == REQUIREMENT_BREATHING_SESSIONS:
        return stats.breathing_sessions
    if requirement_type == REQUIREMENT_COURSES_COMPLETED:
        return stats.courses_completed
    return None


def is_satisfied(rule: BadgeRule, stats: UserStats) -> bool:
    if rule.requirement_value is None:
        return False
    observed = stat_for_requirement(stats, rule.requirement_type)
    if observed is None:
        return False
    return observed >= rule.requirement_value


def select_new_badges(
    rules: list[BadgeRule],
    *,
    stats: UserStats,
    earned_badge_ids: set[UUID],
) -> list[BadgeRule]:
    return [rule for rule in rules if rule.badge_id not in earned_badge_ids and is_satisfied(rule, stats)]
