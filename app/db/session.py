"""
Database session management untuk Security Audit API.
Menggunakan SQLAlchemy dengan async support.
"""

from typing import AsyncGenerator
import logging
import time
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    AsyncEngine,
    create_async_engine,
    async_sessionmaker
)
from sqlalchemy.pool import NullPool
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import event, text

from app.core.config import settings
from app.core.exceptions import StorageError

logger = logging.getLogger(__name__)


def create_engine() -> AsyncEngine:
    """
    Create async SQLAlchemy engine dengan konfigurasi optimal.

    Returns:
        Configured AsyncEngine
    """
    engine_args = {
        "echo": settings.DEBUG,
        "pool_pre_ping": settings.DB_POOL_PRE_PING,
    }

    if settings.ENVIRONMENT == "test" or settings.is_sqlite:
        # NullPool untuk test dan SQLite lokal
        engine_args["poolclass"] = NullPool
    else:
        engine_args["pool_size"] = settings.DB_POOL_SIZE
        engine_args["max_overflow"] = settings.DB_MAX_OVERFLOW
        engine_args["pool_timeout"] = 30
        engine_args["pool_recycle"] = 3600
        engine_args["connect_args"] = {
            "server_settings": {
                "application_name": settings.APP_NAME,
                "jit": "off",
            },
            "command_timeout": 60,
        }

    engine = create_async_engine(settings.DATABASE_URL, **engine_args)

    if settings.is_sqlite:
        @event.listens_for(engine.sync_engine, "connect")
        def enable_sqlite_foreign_keys(dbapi_connection, connection_record):
            """SQLite butuh PRAGMA supaya ON DELETE SET NULL berjalan."""
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


# Create global engine instance
engine = create_engine()

# Create session factory
SessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


@asynccontextmanager
async def get_db_context() -> AsyncGenerator[AsyncSession, None]:
    """
    Context manager untuk database session.
    Useful untuk non-FastAPI contexts (scripts).

    Example:
        async with get_db_context() as db:
            # Use db session
            pass
    """
    async with SessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def storage_guard(db: AsyncSession, operation: str) -> AsyncGenerator[None, None]:
    """
    Terjemahkan SQLAlchemyError menjadi StorageError.

    Session di-rollback supaya bisa dipakai lagi oleh request yang sama.

    Args:
        db: Database session
        operation: Nama operasi untuk log

    Raises:
        StorageError: Jika operasi database gagal
    """
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(f"Storage failure during {operation}: {type(e).__name__}: {e}")
        await db.rollback()
        raise StorageError(details={"operation": operation}) from e


async def init_db(create_tables: bool = False) -> None:
    """
    Initialize database.
    - Test connection
    - Optionally create tables (dev/test; production pakai migrasi)
    """
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            logger.info("Database connection successful")

            if create_tables:
                from app.db.base import Base
                import app.models  # noqa: F401  register mappers
                await conn.run_sync(Base.metadata.create_all)
                logger.info("Database tables created")

        logger.info("Database initialized successfully")

    except SQLAlchemyError as e:
        logger.error(f"Database initialization failed: {e}")
        raise


async def close_db() -> None:
    """
    Close database connections.
    Should be called on application shutdown.
    """
    await engine.dispose()
    logger.info("Database connections closed")


async def check_database_health(db: AsyncSession) -> dict:
    """
    Check database health dan return metrics.

    Returns:
        Dictionary dengan health metrics
    """
    health_info = {
        "connected": False,
        "response_time_ms": None,
        "error": None
    }

    start_time = time.time()
    try:
        result = await db.execute(text("SELECT 1"))
        result.scalar()
    except SQLAlchemyError as e:
        health_info["error"] = str(e)
        logger.error(f"Database health check failed: {e}")
        return health_info

    health_info["connected"] = True
    health_info["response_time_ms"] = round((time.time() - start_time) * 1000, 2)
    return health_info
