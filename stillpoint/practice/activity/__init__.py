from stillpoint.practice.activity.service import ActivityService
from stillpoint.practice.activity.types import ActivityKind, ActivityResult

__all__ = ["ActivityKind", "ActivityResult", "ActivityService"]
