"""
API dependencies module.
Berisi reusable dependencies untuk FastAPI endpoints.
"""

from app.api.dependencies.auth import (
    get_current_account,
    get_current_active_account,
    require_admin
)
from app.api.dependencies.database import get_db, get_redis, get_email_service
from app.api.dependencies.rate_limit import (
    RateLimitDependency,
    client_ip,
    login_rate_limit,
    recovery_rate_limit,
    verify_rate_limit
)

__all__ = [
    "get_current_account",
    "get_current_active_account",
    "require_admin",
    "get_db",
    "get_redis",
    "get_email_service",
    "RateLimitDependency",
    "client_ip",
    "login_rate_limit",
    "recovery_rate_limit",
    "verify_rate_limit"
]
