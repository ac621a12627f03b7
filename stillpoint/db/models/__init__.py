from stillpoint.db.models.badges import Badge, UserBadge
from stillpoint.db.models.breathing_sessions import BreathingSession
from stillpoint.db.models.content import (
    Course,
    CourseEnrollment,
    CourseProgress,
    CourseSession,
    StandaloneMeditation,
)
from stillpoint.db.models.goals import Goal
from stillpoint.db.models.meditation_sessions import MeditationSession
from stillpoint.db.models.notifications import Notification
from stillpoint.db.models.outbox_events import OutboxEvent
from stillpoint.db.models.practice_plans import PracticePlan
from stillpoint.db.models.profiles import Profile
from stillpoint.db.models.reconciliation_runs import ReconciliationRun
from stillpoint.db.models.streaks import Streak
from stillpoint.db.models.token_transactions import TokenTransaction
from stillpoint.db.models.user_purchases import UserPurchase
from stillpoint.db.models.user_tokens import TokenAccount

__all__ = [
    "Badge",
    "BreathingSession",
    "Course",
    "CourseEnrollment",
    "CourseProgress",
    "CourseSession",
    "Goal",
    "MeditationSession",
    "Notification",
    "OutboxEvent",
    "PracticePlan",
    "Profile",
    "ReconciliationRun",
    "StandaloneMeditation",
    "Streak",
    "TokenAccount",
    "TokenTransaction",
    "UserBadge",
    "UserPurchase",
]
