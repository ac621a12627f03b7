from stillpoint.stats.service import StatsService

__all__ = ["StatsService"]
