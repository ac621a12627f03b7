from __future__ import annotations

from stillpoint.economy.content.errors import ContentError, ContentNotFoundError
from stillpoint.economy.tokens.errors import InsufficientTokensError, TokenLedgerError
from stillpoint.practice.goals.errors import GoalError, GoalNotFoundError
from stillpoint.practice.notifications.errors import NotificationNotFoundError
from stillpoint.practice.plans.errors import PracticePlanError, PracticePlanNotFoundError
from stillpoint.practice.sessions.errors import SessionError, SessionNotFoundError, SessionTransitionError
from stillpoint.practice.streak.errors import StreakValidationError
from stillpoint.profiles.errors import UserNotFoundError
from stillpoint.rpc.results import ErrorCode, ProcedureFailure

DOMAIN_ERRORS: tuple[type[Exception], ...] = (
    TokenLedgerError,
    ContentError,
    GoalError,
    SessionError,
    PracticePlanError,
    StreakValidationError,
    NotificationNotFoundError,
    UserNotFoundError,
)

_NOT_FOUND_ERRORS: tuple[type[Exception], ...] = (
    ContentNotFoundError,
    GoalNotFoundError,
    SessionNotFoundError,
    PracticePlanNotFoundError,
    NotificationNotFoundError,
    UserNotFoundError,
)


def failure_from_error(exc: Exception) -> ProcedureFailure:
    if isinstance(exc, InsufficientTokensError):
        return ProcedureFailure(
            code=ErrorCode.INSUFFICIENT_FUNDS,
            error="Insufficient tokens",
            details={"current_balance": exc.current_balance},
        )
    if isinstance(exc, _NOT_FOUND_ERRORS):
        return ProcedureFailure(code=ErrorCode.NOT_FOUND, error=str(exc) or "Not found")
    if isinstance(exc, SessionTransitionError):
        return ProcedureFailure(code=ErrorCode.CONFLICT, error=str(exc))
    return ProcedureFailure(code=ErrorCode.VALIDATION, error=str(exc) or "Invalid request")
