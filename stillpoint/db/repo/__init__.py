from stillpoint.db.repo.badges_repo import BadgesRepo
from stillpoint.db.repo.breathing_sessions_repo import BreathingSessionsRepo
from stillpoint.db.repo.content_repo import ContentRepo
from stillpoint.db.repo.goals_repo import GoalsRepo
from stillpoint.db.repo.meditation_sessions_repo import MeditationSessionsRepo
from stillpoint.db.repo.notifications_repo import NotificationsRepo
from stillpoint.db.repo.outbox_events_repo import OutboxEventsRepo
from stillpoint.db.repo.practice_plans_repo import PracticePlansRepo
from stillpoint.db.repo.profiles_repo import ProfilesRepo
from stillpoint.db.repo.reconciliation_runs_repo import ReconciliationRunsRepo
from stillpoint.db.repo.streaks_repo import StreaksRepo
from stillpoint.db.repo.token_accounts_repo import TokenAccountsRepo
from stillpoint.db.repo.token_transactions_repo import TokenTransactionsRepo
from stillpoint.db.repo.user_purchases_repo import UserPurchasesRepo

__all__ = [
    "BadgesRepo",
    "BreathingSessionsRepo",
    "ContentRepo",
    "GoalsRepo",
    "MeditationSessionsRepo",
    "NotificationsRepo",
    "OutboxEventsRepo",
    "PracticePlansRepo",
    "ProfilesRepo",
    "ReconciliationRunsRepo",
    "StreaksRepo",
    "TokenAccountsRepo",
    "TokenTransactionsRepo",
    "UserPurchasesRepo",
]
