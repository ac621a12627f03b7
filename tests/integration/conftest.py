from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError

from stillpoint.core.integration_db_safety import assess_integration_db_safety
from stillpoint.db import models  # noqa: F401
from stillpoint.db.models.base import Base
from stillpoint.db.session import engine

# Children first; CASCADE covers anything added later.
TRUNCATE_SQL = "TRUNCATE TABLE {} RESTART IDENTITY CASCADE".format(
    ", ".join(table.name for table in reversed(Base.metadata.sorted_tables))
)


@pytest.fixture(scope="session", autouse=True)
def guard_integration_db_target() -> None:
    result = assess_integration_db_safety(str(engine.url))
    if not result.is_safe:
        pytest.skip(f"Integration DB target rejected: {result.reason}")


async def _skip_unless_reachable() -> None:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (DBAPIError, OSError) as exc:  # pragma: no cover - environment-dependent
        pytest.skip(f"PostgreSQL test database is not reachable: {exc}")


@pytest.fixture(autouse=True)
async def clean_practice_tables() -> AsyncIterator[None]:
    # asyncpg connections cannot cross event loops, so every test starts from an empty pool.
    await engine.dispose()
    await _skip_unless_reachable()

    async with engine.begin() as conn:
        await conn.execute(text(TRUNCATE_SQL))

    yield

    await engine.dispose()
