from __future__ import annotations

import argparse
import asyncio

from stillpoint.core.config import get_settings
from stillpoint.core.logging import configure_logging
from stillpoint.db.session import SessionLocal
from stillpoint.practice.badges.catalog import DEFAULT_BADGES, seed_badge_catalog


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Insert missing default badges into the badge catalog.")
    parser.add_argument(
        "--list",
        action="store_true",
        help="Print the default catalog without touching the database.",
    )
    return parser.parse_args(argv)


async def _run() -> int:
    async with SessionLocal.begin() as session:
        created = await seed_badge_catalog(session)

    print(f"seed_badge_catalog created={created} total={len(DEFAULT_BADGES)}")  # noqa: T201
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    if args.list:
        for definition in DEFAULT_BADGES:
            print(  # noqa: T201
                f"{definition.name}: {definition.requirement_type} >= {definition.requirement_value}"
            )
        return 0

    settings = get_settings()
    configure_logging(settings.log_level, app_env=settings.app_env)
    return asyncio.run(_run())


if __name__ == "__main__":
    raise SystemExit(main())
