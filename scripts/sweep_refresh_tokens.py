#!/usr/bin/env python3
"""Delete expired and revoked refresh tokens.

Meant to run periodically (cron, scheduled job). Safe to run while the API
is serving traffic: it only removes rows that can no longer be used.

Usage:
    DATABASE_URL=postgresql://... python scripts/sweep_refresh_tokens.py
    python scripts/sweep_refresh_tokens.py --dry-run
"""
from __future__ import annotations

import argparse
import asyncio
import sys

import structlog

from trainerhub.config import settings
from trainerhub.db import close_db, get_db_context
from trainerhub.logging import configure_logging
from trainerhub.services.refresh_token import RefreshTokenStore

logger = structlog.get_logger()


async def sweep(dry_run: bool = False) -> int:
    """Run one sweep. Returns the number of rows removed (or removable)."""
    try:
        async with get_db_context() as db:
            store = RefreshTokenStore(db)
            if dry_run:
                count = await store.count_expired()
                logger.info("Dry run: refresh tokens eligible for sweep", count=count)
                return count
            return await store.sweep_expired()
    finally:
        await close_db()


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--dry-run", action="store_true", help="Count rows without deleting")
    args = parser.parse_args()

    configure_logging(settings)
    asyncio.run(sweep(dry_run=args.dry_run))
    return 0


if __name__ == "__main__":
    sys.exit(main())
