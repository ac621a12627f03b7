from __future__ import annotations

import argparse
import asyncio
import re
from pathlib import Path

import asyncpg
from alembic import command
from alembic.config import Config
from sqlalchemy.engine import URL, make_url

from stillpoint.core.config import get_settings
from stillpoint.core.integration_db_safety import assert_safe_integration_db

IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
ALEMBIC_INI = Path(__file__).resolve().parent.parent / "alembic.ini"


def _validate_database_name(db_name: str) -> None:
    if IDENTIFIER_RE.fullmatch(db_name) is None:
        raise RuntimeError(f"Unsupported database name '{db_name}'. Only [A-Za-z0-9_] identifiers are supported.")


async def _create_database_if_missing(url: URL) -> bool:
    db_name = url.database or ""
    _validate_database_name(db_name)

    conn = await asyncpg.connect(
        host=url.host or "localhost",
        port=int(url.port or 5432),
        user=url.username,
        password=url.password,
        database="postgres",
    )
    try:
        exists = await conn.fetchval("SELECT 1 FROM pg_database WHERE datname = $1", db_name)
        if exists:
            return False
        await conn.execute(f'CREATE DATABASE "{db_name}"')
        return True
    finally:
        await conn.close()


def _upgrade_schema() -> None:
    command.upgrade(Config(str(ALEMBIC_INI)), "head")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create the local integration-test database and migrate it.")
    parser.add_argument("--skip-migrations", action="store_true", help="Only make sure the database exists.")
    args = parser.parse_args(argv)

    database_url = get_settings().database_url
    assert_safe_integration_db(database_url)
    url = make_url(database_url)

    created = asyncio.run(_create_database_if_missing(url))
    print(f"prepare_test_db: {'created' if created else 'exists'} db={url.database} host={url.host}")  # noqa: T201

    if not args.skip_migrations:
        _upgrade_schema()
        print("prepare_test_db: schema at head")  # noqa: T201
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
