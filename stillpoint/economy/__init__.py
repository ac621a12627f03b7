from stillpoint.economy.content import ContentService
from stillpoint.economy.tokens import TokenLedgerService, TokenReconciliationService

__all__ = ["ContentService", "TokenLedgerService", "TokenReconciliationService"]
