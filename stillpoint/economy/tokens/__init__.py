from stillpoint.economy.tokens.observers import balance_changes
from stillpoint.economy.tokens.reconciliation import TokenReconciliationService
from stillpoint.economy.tokens.service import TokenLedgerService

__all__ = ["TokenLedgerService", "TokenReconciliationService", "balance_changes"]
