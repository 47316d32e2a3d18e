"""
Main application entry point untuk Security Audit API.
Mengkonfigurasi FastAPI application dengan middleware, routers, dan handlers.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.exceptions import SecurityAuditException
from app.db.session import init_db, close_db
from app.api.dependencies.database import close_redis_pool
from app.api.v1 import auth, admin, health
from app.middleware.logging import LoggingMiddleware
from app.middleware.error_handler import ErrorHandlerMiddleware, security_audit_exception_handler

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format=settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    # Tabel dibuat otomatis hanya untuk SQLite / development
    await init_db(create_tables=settings.is_sqlite or settings.ENVIRONMENT == "development")

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application")
    await close_redis_pool()
    await close_db()
    logger.info("Application shutdown complete")


def create_application() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title=settings.APP_NAME,
        description="Account security state machine and audit pipeline",
        version=settings.APP_VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan
    )

    # Middleware dieksekusi dalam urutan terbalik: CORS -> Logging -> ErrorHandler

    # 1. Error Handler (catches all exceptions)
    app.add_middleware(
        ErrorHandlerMiddleware,
        debug=settings.DEBUG
    )

    # 2. Logging
    app.add_middleware(
        LoggingMiddleware,
        log_request_body=settings.DEBUG,
        exclude_paths=[f"{settings.API_V1_STR}/health"]
    )

    # 3. CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin).rstrip("/") for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    # Include API routers
    app.include_router(health.router, prefix=settings.API_V1_STR)
    app.include_router(auth.router, prefix=settings.API_V1_STR)
    app.include_router(admin.router, prefix=settings.API_V1_STR)

    @app.get("/", include_in_schema=False)
    async def root():
        """Root endpoint."""
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "operational",
            "docs": "/docs" if settings.DEBUG else None
        }

    app.add_exception_handler(SecurityAuditException, security_audit_exception_handler)

    return app


# Create application instance
app = create_application()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
