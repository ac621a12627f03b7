from stillpoint.practice.plans.service import PracticePlanService

__all__ = ["PracticePlanService"]
