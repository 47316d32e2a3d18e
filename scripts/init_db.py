#!/usr/bin/env python
"""
Script untuk inisialisasi database Security Audit API.
Membuat semua tabel dan memverifikasi hasilnya.
Usage: python scripts/init_db.py
"""

import asyncio
import sys
from pathlib import Path
import logging

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent))

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.db.session import engine, init_db

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

REQUIRED_TABLES = {"accounts", "security_events", "admin_actions"}


async def verify_tables() -> bool:
    """Verify that all required tables exist."""
    async with engine.connect() as conn:
        existing_tables = set(
            await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
        )

    missing_tables = REQUIRED_TABLES - existing_tables
    if missing_tables:
        logger.warning(f"Missing tables: {missing_tables}")
        return False

    logger.info("All required tables exist")
    return True


async def main():
    """Main initialization function."""
    logger.info("=== Security Audit API Database Initialization ===")

    try:
        logger.info("Step 1: Creating database tables...")
        await init_db(create_tables=True)

        logger.info("Step 2: Verifying tables...")
        if not await verify_tables():
            sys.exit(1)

        logger.info("Database initialization completed successfully")
        logger.info("Next: run 'python scripts/create_admin.py' to create an admin account")

    except SQLAlchemyError as e:
        logger.error(f"Database initialization failed: {e}")
        sys.exit(1)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    if not settings.DATABASE_URL:
        logger.error("DATABASE_URL not configured. Please set it in .env file")
        sys.exit(1)

    asyncio.run(main())
