#!/usr/bin/env python3
"""
Cron job script to sync every store that has auto-sync enabled and is due.
Add to crontab: 0 * * * * cd /path/to/app && /path/to/venv/bin/python scripts/run_sync.py

This runs the sync as a standalone script, not through the web server.
"""

import asyncio
import logging
import sys

from profit_tracker.config import settings
from profit_tracker.db import SQLiteDatabase
from profit_tracker.processor import run_due_stores

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


async def main() -> int:
    logger.info("Starting scheduled sync...")

    db = SQLiteDatabase(settings.database_path)
    await db.initialize()

    try:
        results = await run_due_stores(db, settings)

        failed = [r for r in results if not r.success]
        for r in failed:
            logger.error(f"  {r.store.name}: {r.error}")

        return 1 if failed else 0

    finally:
        await db.close()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
