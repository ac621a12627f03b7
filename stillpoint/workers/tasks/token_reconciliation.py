from __future__ import annotations

from datetime import datetime, timezone

from stillpoint.core.config import get_settings
from stillpoint.db.session import SessionLocal
from stillpoint.economy.tokens.reconciliation import TokenReconciliationService
from stillpoint.workers.asyncio_runner import run_async_job
from stillpoint.workers.celery_app import celery_app


async def run_token_reconciliation_async(*, batch_size: int | None = None) -> dict[str, int | str]:
    resolved_batch_size = batch_size or get_settings().reconciliation_batch_size
    started_at = datetime.now(timezone.utc)

    async with SessionLocal.begin() as session:
        summary = await TokenReconciliationService.reconcile_all(
            session,
            now_utc=started_at,
            batch_size=resolved_batch_size,
        )

    return summary.as_log_fields()


@celery_app.task(name="stillpoint.workers.tasks.token_reconciliation.run_token_reconciliation")
def run_token_reconciliation(batch_size: int | None = None) -> dict[str, int | str]:
    return run_async_job(
        "token_reconciliation",
        lambda: run_token_reconciliation_async(batch_size=batch_size),
    )


celery_app.conf.beat_schedule = celery_app.conf.beat_schedule or {}
celery_app.conf.beat_schedule.update(
    {
        "token-reconciliation-every-15-minutes": {
            "task": "stillpoint.workers.tasks.token_reconciliation.run_token_reconciliation",
            "schedule": 900.0,
            "options": {"queue": "q_normal"},
        },
    }
)
