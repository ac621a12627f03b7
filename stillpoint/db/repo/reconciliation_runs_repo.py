from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from stillpoint.db.models.reconciliation_runs import ReconciliationRun

RUN_SCOPE_ALL = "all"
RUN_SCOPE_USER = "user"


class ReconciliationRunsRepo:
    @staticmethod
    async def record(
        session: AsyncSession,
        *,
        user_id: UUID | None,
        started_at: datetime,
        finished_at: datetime,
        status: str,
        accounts_checked: int,
        diff_count: int,
    ) -> ReconciliationRun:
        """Stores one finished run; a run for a single account is scoped to that user."""
        run = ReconciliationRun(
            scope=RUN_SCOPE_ALL if user_id is None else RUN_SCOPE_USER,
            user_id=user_id,
            started_at=started_at,
            finished_at=finished_at,
            status=status,
            accounts_checked=accounts_checked,
            diff_count=diff_count,
        )
        session.add(run)
        await session.flush()
        return run
