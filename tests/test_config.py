from __future__ import annotations

from stillpoint.core.config import Settings


def test_settings_defaults() -> None:
    settings = Settings(_env_file=None)

    assert settings.streak_grace_days_default == 1
    assert settings.streak_grace_days_cap == 3
    assert settings.activity_timezone == "UTC"
    assert settings.reconciliation_batch_size == 500


def test_settings_read_environment(monkeypatch) -> None:
    monkeypatch.setenv("STREAK_GRACE_DAYS_CAP", "5")
    monkeypatch.setenv("ACTIVITY_TIMEZONE", "Europe/Berlin")
    monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://u:p@localhost:5432/stillpoint_test")

    settings = Settings(_env_file=None)

    assert settings.streak_grace_days_cap == 5
    assert settings.activity_timezone == "Europe/Berlin"
    assert settings.database_url.endswith("/stillpoint_test")
