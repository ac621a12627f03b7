from stillpoint.workers.tasks.token_reconciliation import run_token_reconciliation

__all__ = ["run_token_reconciliation"]
