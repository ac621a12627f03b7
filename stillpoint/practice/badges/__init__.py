from stillpoint.practice.badges.catalog import DEFAULT_BADGES, seed_badge_catalog
from stillpoint.practice.badges.service import BadgeService

__all__ = ["BadgeService", "DEFAULT_BADGES", "seed_badge_catalog"]
