"""
Global error handler untuk Security Audit API.
Menangani semua exceptions dan mengubahnya menjadi response yang konsisten:
{"detail", "error_type", "details", "request_id"}.
"""

from typing import Callable, Optional, Dict, Any
import traceback
import logging
from datetime import datetime, timezone

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from app.core.config import settings
from app.core.exceptions import (
    SecurityAuditException,
    AuthenticationError,
    LoginFailedException
)


logger = logging.getLogger("secaudit.error")


def create_error_response(
    request: Request,
    status_code: int,
    message: str,
    error_type: str,
    details: Optional[Dict[str, Any]] = None,
    debug_info: Optional[Dict[str, Any]] = None
) -> JSONResponse:
    """
    Create standardized error response.

    Args:
        request: Request object
        status_code: HTTP status code
        message: Error message
        error_type: Nama exception class
        details: Additional error details
        debug_info: Informasi debug (hanya jika DEBUG)

    Returns:
        JSON error response
    """
    content = {
        "detail": message,
        "error_type": error_type,
        "details": details or {},
        "request_id": getattr(request.state, "request_id", None)
    }

    if debug_info:
        content["debug"] = debug_info

    headers = {
        "X-Content-Type-Options": "nosniff",
        "Cache-Control": "no-store"
    }
    retry_after = (details or {}).get("retry_after")
    if retry_after is not None:
        headers["Retry-After"] = str(retry_after)

    return JSONResponse(status_code=status_code, content=content, headers=headers)


def log_error(request: Request, error: Exception, status_code: int) -> None:
    """
    Log error dengan context request.

    Args:
        request: Request object
        error: Exception
        status_code: HTTP status code
    """
    log_entry = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "request_id": getattr(request.state, "request_id", "unknown"),
        "method": request.method,
        "path": request.url.path,
        "status_code": status_code,
        "error_type": type(error).__name__,
        "error_message": str(error),
        "client_ip": request.client.host if request.client else "unknown",
        "user_agent": request.headers.get("user-agent", "unknown")
    }

    if status_code >= 500:
        logger.error(log_entry, exc_info=error)
    else:
        logger.warning(log_entry)


async def security_audit_exception_handler(request: Request, exc: SecurityAuditException) -> JSONResponse:
    """
    Exception handler untuk SecurityAuditException dan turunannya.
    Didaftarkan di FastAPI app.

    Semua kegagalan login dilaporkan sebagai AuthenticationError supaya
    client tidak bisa membedakan cabangnya.
    """
    log_error(request, exc, exc.status_code)

    error_type = type(exc).__name__
    if isinstance(exc, LoginFailedException):
        error_type = AuthenticationError.__name__

    return create_error_response(
        request=request,
        status_code=exc.status_code,
        message=exc.message,
        error_type=error_type,
        details=exc.details
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Global error handler middleware untuk exceptions yang tidak ditangani handler lain.

    Internal error details disembunyikan kecuali DEBUG aktif.
    """

    def __init__(
        self,
        app: ASGIApp,
        debug: Optional[bool] = None
    ):
        """
        Initialize error handler middleware.

        Args:
            app: FastAPI/Starlette application
            debug: Debug mode (shows stack traces)
        """
        super().__init__(app)
        self.debug = debug if debug is not None else settings.DEBUG

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request dengan error handling.

        Args:
            request: Incoming request
            call_next: Next middleware/endpoint

        Returns:
            Response atau error response
        """
        try:
            return await call_next(request)
        except SecurityAuditException as exc:
            return await security_audit_exception_handler(request, exc)
        except Exception as exc:
            log_error(request, exc, 500)

            if self.debug:
                return create_error_response(
                    request=request,
                    status_code=500,
                    message=str(exc),
                    error_type="InternalServerError",
                    debug_info={
                        "path": request.url.path,
                        "method": request.method,
                        "stack_trace": traceback.format_exc().split("\n")
                    }
                )

            return create_error_response(
                request=request,
                status_code=500,
                message="An internal server error occurred",
                error_type="InternalServerError"
            )
