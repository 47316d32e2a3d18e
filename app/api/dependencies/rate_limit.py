"""
Rate limiting dependencies untuk FastAPI.
Menggunakan Redis untuk distributed rate limiting.
"""

from typing import Optional, Callable
from datetime import datetime
import logging
import uuid

from fastapi import Depends, Request
import redis.asyncio as redis

from app.api.dependencies.database import get_redis
from app.core.config import settings
from app.core.exceptions import RateLimitError

logger = logging.getLogger(__name__)


def client_ip(request: Request) -> str:
    """IP address client, atau "unknown" jika tidak tersedia."""
    return request.client.host if request.client else "unknown"


class RateLimitDependency:
    """
    Rate limiting dependency menggunakan sliding window algorithm.
    Setiap request disimpan di sorted set dengan timestamp sebagai score.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: int,
        namespace: str = "api",
        key_func: Optional[Callable[[Request], str]] = None
    ):
        """
        Initialize rate limiter.

        Args:
            max_requests: Maximum requests allowed dalam window
            window_seconds: Time window dalam seconds
            namespace: Namespace untuk Redis keys
            key_func: Custom function untuk generate rate limit key
        """
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.namespace = namespace
        self.key_func = key_func or self._default_key_func

    def _default_key_func(self, request: Request) -> str:
        return f"ratelimit:{self.namespace}:{client_ip(request)}"

    async def __call__(
        self,
        request: Request,
        redis_client: redis.Redis = Depends(get_redis)
    ) -> None:
        """
        Check rate limit untuk request.

        Args:
            request: FastAPI request
            redis_client: Redis connection

        Raises:
            RateLimitError: Jika rate limit exceeded
        """
        if not settings.RATE_LIMIT_ENABLED:
            return

        key = self.key_func(request)
        now = datetime.now().timestamp()
        window_start = now - self.window_seconds

        # Remove old entries
        await redis_client.zremrangebyscore(key, 0, window_start)
        request_count = await redis_client.zcard(key)

        if request_count >= self.max_requests:
            oldest_request = await redis_client.zrange(key, 0, 0, withscores=True)
            if oldest_request:
                retry_after = max(int(oldest_request[0][1] + self.window_seconds - now), 1)
            else:
                retry_after = self.window_seconds

            logger.warning(f"Rate limit exceeded for {key}")
            raise RateLimitError(
                details={
                    "retry_after": retry_after,
                    "limit": self.max_requests,
                    "window_seconds": self.window_seconds
                }
            )

        # Member unik supaya dua request di timestamp yang sama tetap dihitung
        await redis_client.zadd(key, {f"{now}:{uuid.uuid4().hex}": now})
        await redis_client.expire(key, self.window_seconds)

        request.state.rate_limit_headers = {
            "X-RateLimit-Limit": str(self.max_requests),
            "X-RateLimit-Remaining": str(self.max_requests - request_count - 1),
            "X-RateLimit-Reset": str(int(now + self.window_seconds))
        }


login_rate_limit = RateLimitDependency(
    max_requests=settings.LOGIN_RATE_LIMIT_PER_MINUTE,
    window_seconds=60,
    namespace="login"
)

recovery_rate_limit = RateLimitDependency(
    max_requests=settings.RECOVERY_RATE_LIMIT_PER_HOUR,
    window_seconds=3600,
    namespace="recovery"
)

verify_rate_limit = RateLimitDependency(
    max_requests=settings.VERIFY_RATE_LIMIT_PER_HOUR,
    window_seconds=3600,
    namespace="verify"
)
