"""
Request logging middleware untuk Security Audit API.
Logs all HTTP requests dengan request ID, timing, dan redaction data sensitif.
"""

from typing import Callable, Optional, Dict, Any
from urllib.parse import parse_qsl
import time
import json
import uuid
import logging
from datetime import datetime, timezone

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp


logger = logging.getLogger("secaudit.access")


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Request/response logging middleware.

    Features:
    - Request ID generation (juga dipakai oleh error response)
    - Request/response timing
    - Body logging dengan redaction untuk password dan recovery code
    - Structured JSON logging
    """

    def __init__(
        self,
        app: ASGIApp,
        log_request_body: bool = False,
        exclude_paths: Optional[list] = None,
        sensitive_fields: Optional[list] = None,
        max_body_size: int = 1024
    ):
        """
        Initialize logging middleware.

        Args:
            app: FastAPI/Starlette application
            log_request_body: Whether to log request bodies
            exclude_paths: Paths to exclude from logging
            sensitive_fields: Fields to redact from logs
            max_body_size: Maximum body size to log (bytes)
        """
        super().__init__(app)
        self.log_request_body = log_request_body
        self.exclude_paths = exclude_paths or ["/health", "/api/v1/health"]
        self.sensitive_fields = sensitive_fields or [
            "password", "token", "secret", "authorization", "code"
        ]
        self.max_body_size = max_body_size

    def should_log_path(self, path: str) -> bool:
        return not any(path.startswith(excluded) for excluded in self.exclude_paths)

    def redact_sensitive_data(self, data: Any) -> Any:
        """
        Redact sensitive fields from data.

        Args:
            data: Data to redact

        Returns:
            Redacted data
        """
        if isinstance(data, dict):
            redacted = {}
            for key, value in data.items():
                if any(sensitive in key.lower() for sensitive in self.sensitive_fields):
                    redacted[key] = "[REDACTED]"
                else:
                    redacted[key] = self.redact_sensitive_data(value)
            return redacted
        elif isinstance(data, list):
            return [self.redact_sensitive_data(item) for item in data]
        else:
            return data

    def format_request_body(self, request: Request, body: bytes) -> str:
        """
        Format body untuk log. JSON dan form body di-redact,
        body lain hanya dicatat ukurannya.
        """
        if len(body) > self.max_body_size:
            return f"[Body too large: {len(body)} bytes]"

        content_type = request.headers.get("content-type", "")
        text = body.decode("utf-8", errors="ignore")

        if content_type.startswith("application/json"):
            try:
                return json.dumps(self.redact_sensitive_data(json.loads(text)))
            except json.JSONDecodeError:
                return "[Invalid JSON body]"

        if content_type.startswith("application/x-www-form-urlencoded"):
            return json.dumps(self.redact_sensitive_data(dict(parse_qsl(text))))

        return f"[{content_type or 'unknown'} body: {len(body)} bytes]"

    def create_log_entry(
        self,
        request: Request,
        response: Optional[Response] = None,
        duration_ms: Optional[float] = None,
        error: Optional[Exception] = None,
        request_body: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Create structured log entry.

        Returns:
            Log entry dictionary
        """
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "request_id": getattr(request.state, "request_id", "unknown"),
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "client_ip": request.client.host if request.client else "unknown",
            "user_agent": request.headers.get("user-agent", "unknown"),
        }

        if request_body:
            log_entry["request_body"] = request_body

        if response is not None:
            log_entry["status_code"] = response.status_code
            if duration_ms is not None:
                log_entry["duration_ms"] = round(duration_ms, 2)

        if error is not None:
            log_entry["error"] = {
                "type": type(error).__name__,
                "message": str(error)
            }

        return log_entry

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request with logging.

        Args:
            request: Incoming request
            call_next: Next middleware/endpoint

        Returns:
            Response
        """
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        if not self.should_log_path(request.url.path):
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response

        start_time = time.time()

        request_body = None
        if self.log_request_body and request.method in ["POST", "PUT", "PATCH"]:
            request_body = self.format_request_body(request, await request.body())

        response = None
        error = None

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            # Diisi oleh RateLimitDependency pada endpoint yang di-limit
            for header, value in getattr(request.state, "rate_limit_headers", {}).items():
                response.headers[header] = value
            return response

        except Exception as e:
            error = e
            raise

        finally:
            duration_ms = (time.time() - start_time) * 1000
            log_entry = self.create_log_entry(
                request=request,
                response=response,
                duration_ms=duration_ms,
                error=error,
                request_body=request_body
            )

            if error or (response is not None and response.status_code >= 500):
                logger.error(json.dumps(log_entry))
            elif response is not None and response.status_code >= 400:
                logger.warning(json.dumps(log_entry))
            else:
                logger.info(json.dumps(log_entry))
