"""Seed script to import the demo content into a fresh database.

The import runs once per database: a second run finds the first-run flag set
and exits without writing anything.

Usage:
    PYTHONPATH=backend/src uv run python backend/scripts/seed.py
    PYTHONPATH=backend/src uv run python backend/scripts/seed.py populate --data path/to/data.json

Exit status is 0 when the data was imported or had already been imported, and
1 when the import failed.
"""

import argparse
import asyncio
import logging
from pathlib import Path

from core.config import get_settings
from db.session import create_engine_for, create_session_factory
from services.seed_service import SeedOutcome, seed_example_app

logger = logging.getLogger('seed')


async def populate(data_path: Path | None = None) -> SeedOutcome:
    """Run the one-shot import against the configured database."""
    settings = get_settings()
    engine = create_engine_for(settings)
    session_factory = create_session_factory(engine)
    try:
        return await seed_example_app(session_factory, settings, data_path=data_path)
    finally:
        await engine.dispose()


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns the process exit code."""
    parser = argparse.ArgumentParser(description='Import the demo content into the database.')
    subparsers = parser.add_subparsers(dest='command')

    populate_parser = subparsers.add_parser('populate', help='Import seed data (default)')
    populate_parser.add_argument(
        '--data', type=Path, default=None,
        help='Seed dataset to import instead of SEED_DATA_PATH',
    )

    args = parser.parse_args(argv)

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    try:
        asyncio.run(populate(getattr(args, 'data', None)))
    except Exception:
        logger.exception('Could not import seed data')
        return 1
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
