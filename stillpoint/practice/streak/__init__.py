from stillpoint.practice.streak.service import StreakService

__all__ = ["StreakService"]
