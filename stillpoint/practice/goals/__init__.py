from stillpoint.practice.goals.service import GoalService

__all__ = ["GoalService"]
