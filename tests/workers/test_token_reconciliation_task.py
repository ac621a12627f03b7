from stillpoint.workers.celery_app import celery_app
from stillpoint.workers.tasks import token_reconciliation


def test_run_token_reconciliation_task_wrapper(monkeypatch) -> None:
    async def fake_async(*, batch_size: int | None = None) -> dict[str, int | str]:
        return {"run_id": "run-1", "accounts_checked": batch_size or 0, "diff_count": 0, "status": "OK"}

    monkeypatch.setattr(token_reconciliation, "run_token_reconciliation_async", fake_async)

    result = token_reconciliation.run_token_reconciliation(batch_size=25)
    assert result == {"run_id": "run-1", "accounts_checked": 25, "diff_count": 0, "status": "OK"}


def test_token_reconciliation_is_scheduled_every_fifteen_minutes() -> None:
    entry = celery_app.conf.beat_schedule["token-reconciliation-every-15-minutes"]

    assert entry["task"] == "stillpoint.workers.tasks.token_reconciliation.run_token_reconciliation"
    assert entry["schedule"] == 900.0
    assert entry["options"] == {"queue": "q_normal"}


def test_celery_ping_task_registered() -> None:
    assert "stillpoint.workers.celery_app.ping" in celery_app.tasks
