from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from stillpoint.db.repo.reconciliation_runs_repo import ReconciliationRunsRepo
from stillpoint.db.repo.token_accounts_repo import TokenAccountsRepo
from stillpoint.db.repo.token_transactions_repo import TokenTransactionsRepo
from stillpoint.economy.tokens.types import AccountReconciliation

logger = structlog.get_logger("stillpoint.economy.tokens.reconciliation")


@dataclass(slots=True)
class ReconciliationSummary:
    run_id: UUID
    accounts_checked: int
    diff_count: int
    status: str
    mismatches: list[AccountReconciliation]

    def as_log_fields(self) -> dict[str, int | str]:
        return {
            "run_id": str(self.run_id),
            "accounts_checked": self.accounts_checked,
            "diff_count": self.diff_count,
            "status": self.status,
        }


def compare_balances(
    stored_balances: dict[UUID, int],
    ledger_balances: dict[UUID, int],
) -> list[AccountReconciliation]:
    return [
        AccountReconciliation(
            user_id=user_id,
            stored_balance=stored_balance,
            ledger_balance=ledger_balances.get(user_id, 0),
        )
        for user_id, stored_balance in stored_balances.items()
    ]


def reconciliation_status(diff_count: int) -> str:
    return "OK" if diff_count == 0 else "DIFF"


def _log_mismatches(mismatches: list[AccountReconciliation]) -> None:
    for mismatch in mismatches:
        logger.warning(
            "token_balance_mismatch",
            user_id=str(mismatch.user_id),
            stored_balance=mismatch.stored_balance,
            ledger_balance=mismatch.ledger_balance,
            diff=mismatch.diff,
        )


class TokenReconciliationService:
    @staticmethod
    async def reconcile_user(
        session: AsyncSession,
        *,
        user_id: UUID,
        now_utc: datetime,
    ) -> ReconciliationSummary:
        stored_balance = await TokenAccountsRepo.get_balance(session, user_id)
        ledger_balance = await TokenTransactionsRepo.sum_for_user(session, user_id)
        comparison = AccountReconciliation(
            user_id=user_id,
            stored_balance=stored_balance,
            ledger_balance=ledger_balance,
        )
        mismatches = [] if comparison.matches else [comparison]
        _log_mismatches(mismatches)

        status = reconciliation_status(len(mismatches))
        run = await ReconciliationRunsRepo.record(
            session,
            user_id=user_id,
            started_at=now_utc,
            finished_at=datetime.now(timezone.utc),
            status=status,
            accounts_checked=1,
            diff_count=len(mismatches),
        )
        return ReconciliationSummary(
            run_id=run.id,
            accounts_checked=1,
            diff_count=len(mismatches),
            status=status,
            mismatches=mismatches,
        )

    @staticmethod
    async def reconcile_all(
        session: AsyncSession,
        *,
        now_utc: datetime,
        batch_size: int,
    ) -> ReconciliationSummary:
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")

        accounts_checked = 0
        mismatches: list[AccountReconciliation] = []
        after_user_id: UUID | None = None
        while True:
            accounts = await TokenAccountsRepo.list_page(
                session,
                after_user_id=after_user_id,
                limit=batch_size,
            )
            if not accounts:
                break

            stored_balances = {account.user_id: account.balance for account in accounts}
            ledger_balances = await TokenTransactionsRepo.sum_by_users(session, stored_balances.keys())
            page_mismatches = [
                comparison
                for comparison in compare_balances(stored_balances, ledger_balances)
                if not comparison.matches
            ]
            _log_mismatches(page_mismatches)
            mismatches.extend(page_mismatches)
            accounts_checked += len(accounts)
            after_user_id = accounts[-1].user_id
            if len(accounts) < batch_size:
                break

        status = reconciliation_status(len(mismatches))
        run = await ReconciliationRunsRepo.record(
            session,
            user_id=None,
            started_at=now_utc,
            finished_at=datetime.now(timezone.utc),
            status=status,
            accounts_checked=accounts_checked,
            diff_count=len(mismatches),
        )
        summary = ReconciliationSummary(
            run_id=run.id,
            accounts_checked=accounts_checked,
            diff_count=len(mismatches),
            status=status,
            mismatches=mismatches,
        )
        if mismatches:
            logger.warning("token_reconciliation_diff_detected", **summary.as_log_fields())
        else:
            logger.info("token_reconciliation_finished", **summary.as_log_fields())
        return summary
