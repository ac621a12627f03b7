from __future__ import annotations

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from stillpoint.db.models.badges import Badge
from stillpoint.db.repo.badges_repo import BadgesRepo
from stillpoint.practice.badges.types import (
    REQUIREMENT_BREATHING_SESSIONS,
    REQUIREMENT_COURSES_COMPLETED,
    REQUIREMENT_STREAK_DAYS,
    REQUIREMENT_TOTAL_MINUTES,
    REQUIREMENT_TOTAL_SESSIONS,
    BadgeDefinition,
)

logger = structlog.get_logger("stillpoint.practice.badges.catalog")

DEFAULT_BADGES: tuple[BadgeDefinition, ...] = (
    BadgeDefinition(
        name="First Breath",
        description="Complete your first meditation session",
        icon="sprout",
        category="milestones",
        requirement_type=REQUIREMENT_TOTAL_SESSIONS,
        requirement_value=1,
        tier="bronze",
    ),
    BadgeDefinition(
        name="Settling In",
        description="Complete 10 meditation sessions",
        icon="leaf",
        category="milestones",
        requirement_type=REQUIREMENT_TOTAL_SESSIONS,
        requirement_value=10,
        tier="bronze",
    ),
    BadgeDefinition(
        name="Steady Practice",
        description="Complete 50 meditation sessions",
        icon="tree",
        category="milestones",
        requirement_type=REQUIREMENT_TOTAL_SESSIONS,
        requirement_value=50,
        tier="silver",
    ),
    BadgeDefinition(
        name="Centurion of Calm",
        description="Complete 100 meditation sessions",
        icon="mountain",
        category="milestones",
        requirement_type=REQUIREMENT_TOTAL_SESSIONS,
        requirement_value=100,
        tier="gold",
    ),
    BadgeDefinition(
        name="First Hour",
        description="Meditate for 60 minutes in total",
        icon="clock",
        category="minutes",
        requirement_type=REQUIREMENT_TOTAL_MINUTES,
        requirement_value=60,
        tier="bronze",
    ),
    BadgeDefinition(
        name="Ten Hours Still",
        description="Meditate for 600 minutes in total",
        icon="hourglass",
        category="minutes",
        requirement_type=REQUIREMENT_TOTAL_MINUTES,
        requirement_value=600,
        tier="gold",
    ),
    BadgeDefinition(
        name="Three Day Flow",
        description="Practice three days in a row",
        icon="flame",
        category="streaks",
        requirement_type=REQUIREMENT_STREAK_DAYS,
        requirement_value=3,
        tier="bronze",
    ),
    BadgeDefinition(
        name="Week of Stillness",
        description="Practice seven days in a row",
        icon="calendar",
        category="streaks",
        requirement_type=REQUIREMENT_STREAK_DAYS,
        requirement_value=7,
        tier="silver",
    ),
    BadgeDefinition(
        name="Month of Presence",
        description="Practice thirty days in a row",
        icon="moon",
        category="streaks",
        requirement_type=REQUIREMENT_STREAK_DAYS,
        requirement_value=30,
        tier="platinum",
    ),
    BadgeDefinition(
        name="Deep Breather",
        description="Complete 10 breathing exercises",
        icon="wind",
        category="breathing",
        requirement_type=REQUIREMENT_BREATHING_SESSIONS,
        requirement_value=10,
        tier="silver",
    ),
    BadgeDefinition(
        name="Student of the Path",
        description="Complete 5 course sessions",
        icon="book",
        category="courses",
        requirement_type=REQUIREMENT_COURSES_COMPLETED,
        requirement_value=5,
        tier="silver",
    ),
)


async def seed_badge_catalog(
    session: AsyncSession,
    definitions: tuple[BadgeDefinition, ...] = DEFAULT_BADGES,
) -> int:
    """Inserts catalog badges missing by name; existing rows are left untouched."""
    created = 0
    for definition in definitions:
        existing = await BadgesRepo.get_by_name(session, definition.name)
        if existing is not None:
            continue
        await BadgesRepo.create(
            session,
            badge=Badge(
                name=definition.name,
                description=definition.description,
                icon=definition.icon,
                category=definition.category,
                requirement_type=definition.requirement_type,
                requirement_value=definition.requirement_value,
                tier=definition.tier,
            ),
        )
        created += 1

    logger.info("badge_catalog_seeded", created=created, total=len(definitions))
    return created
