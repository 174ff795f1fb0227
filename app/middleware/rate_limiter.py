"""
Rate limiting middleware for vidproxy.

Per-client sliding window: at most ``max_requests`` API requests per
``window_seconds``. Redis is used as a shared store when configured, with an
in-memory fallback.
"""

import time
import logging
from typing import Dict, Any, Optional, Callable, Tuple
from collections import defaultdict, deque
from dataclasses import dataclass
from fastapi import Request, Response
from fastapi.responses import JSONResponse
import redis.asyncio as redis

from app.core.config import Settings
from app.core.exceptions import RateLimitExceededError


logger = logging.getLogger(__name__)


@dataclass
class RateLimitConfig:
    """Rate limit configuration."""
    window_seconds: int = 15 * 60
    max_requests: int = 100
    redis_url: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "RateLimitConfig":
        return cls(
            window_seconds=settings.rate_limit_window_seconds,
            max_requests=settings.rate_limit_max,
            redis_url=settings.redis_url,
        )


class RateLimiter:
    """
    Sliding-window rate limiter keyed by client IP.

    Features:
    - Per-IP limiting over a single configurable window
    - Redis-based distributed limiting when REDIS_URL is set
    - In-memory fallback when Redis is absent or failing
    """

    def __init__(self, config: RateLimitConfig):
        self.config = config
        self.redis_client: Optional[redis.Redis] = None

        # In-memory fallback for when Redis is unavailable
        self.memory_store: Dict[str, deque] = defaultdict(deque)
        self._last_sweep = 0.0

        logger.info(f"Rate limiter initialized with config: {config}")

    async def initialize(self):
        """Connect to Redis if configured."""
        if not self.config.redis_url:
            logger.info("Redis not configured, using in-memory rate limiting")
            return
        try:
            self.redis_client = redis.from_url(self.config.redis_url, decode_responses=True)
            await self.redis_client.ping()
            logger.info("Rate limiter connected to Redis")
        except Exception as e:
            logger.error(f"Failed to connect to Redis for rate limiting: {e}")
            self.redis_client = None

    async def cleanup(self):
        """Close the Redis connection."""
        if self.redis_client:
            await self.redis_client.close()
            self.redis_client = None

    def get_client_id(self, request: Request) -> str:
        """
        Get client identifier for rate limiting.

        Args:
            request: FastAPI request object

        Returns:
            str: Client identifier (IP address or forwarded IP)
        """
        # Check for forwarded IP (behind proxy/CDN)
        forwarded_for = request.headers.get('X-Forwarded-For')
        if forwarded_for:
            return forwarded_for.split(',')[0].strip()

        # Check for real IP (behind proxy)
        real_ip = request.headers.get('X-Real-IP')
        if real_ip:
            return real_ip

        # Fall back to direct client IP
        return request.client.host if request.client else 'unknown'

    async def hit(self, client_id: str) -> Tuple[bool, Dict[str, Any]]:
        """
        Record a request and check the client's quota.

        Args:
            client_id: Client identifier

        Returns:
            tuple: (is_limited, rate_limit_info)
        """
        current_time = time.time()

        try:
            if self.redis_client:
                count, oldest = await self._hit_redis(client_id, current_time)
            else:
                count, oldest = self._hit_memory(client_id, current_time)
        except Exception as e:
            logger.error(f"Rate limit check error: {e}")
            count, oldest = self._hit_memory(client_id, current_time)

        limited = count > self.config.max_requests

        reset_in = max(1, int(oldest + self.config.window_seconds - current_time))
        return limited, {
            'limit': self.config.max_requests,
            'remaining': max(0, self.config.max_requests - count),
            'reset': reset_in,
        }

    async def _hit_redis(self, client_id: str, current_time: float) -> Tuple[int, float]:
        """Redis-based sliding window."""
        key = f"rate_limit:{client_id}"
        window = self.config.window_seconds

        pipe = self.redis_client.pipeline()
        pipe.zremrangebyscore(key, 0, current_time - window)
        pipe.zadd(key, {str(current_time): current_time})
        pipe.zcard(key)
        pipe.zrange(key, 0, 0, withscores=True)
        pipe.expire(key, window)
        results = await pipe.execute()

        count = results[2]
        oldest = results[3][0][1] if results[3] else current_time
        return count, float(oldest)

    def _hit_memory(self, client_id: str, current_time: float) -> Tuple[int, float]:
        """Memory-based sliding window (fallback)."""
        if current_time - self._last_sweep >= self.config.window_seconds:
            self._sweep_memory(current_time)

        requests = self.memory_store[client_id]
        self._prune(requests, current_time)

        requests.append(current_time)
        return len(requests), requests[0]

    def _prune(self, requests: deque, current_time: float) -> None:
        while requests and requests[0] <= current_time - self.config.window_seconds:
            requests.popleft()

    def _sweep_memory(self, current_time: float) -> None:
        """Drop clients with no requests left in the window."""
        for client_id in list(self.memory_store):
            requests = self.memory_store[client_id]
            self._prune(requests, current_time)
            if not requests:
                del self.memory_store[client_id]
        self._last_sweep = current_time


def _rate_limit_headers(info: Dict[str, Any]) -> Dict[str, str]:
    return {
        "RateLimit-Limit": str(info['limit']),
        "RateLimit-Remaining": str(info['remaining']),
        "RateLimit-Reset": str(info['reset']),
    }


async def rate_limit_middleware(request: Request, call_next: Callable) -> Response:
    """
    Rate limiting middleware for FastAPI.

    Only ``/api/`` routes are limited; the limiter instance lives on
    ``app.state.rate_limiter`` and limiting is off when it is None.

    Args:
        request: FastAPI request
        call_next: Next middleware/endpoint

    Returns:
        Response with rate limiting applied
    """
    rate_limiter: Optional[RateLimiter] = getattr(request.app.state, "rate_limiter", None)
    if rate_limiter is None or not request.url.path.startswith('/api/'):
        return await call_next(request)

    client_id = rate_limiter.get_client_id(request)
    is_limited, info = await rate_limiter.hit(client_id)
    headers = _rate_limit_headers(info)

    if is_limited:
        error = RateLimitExceededError(retry_after=info['reset'])
        logger.warning(f"Rate limit exceeded for {client_id} on {request.url.path}")
        return JSONResponse(
            status_code=error.status_code,
            content={"status": False, "message": error.message},
            headers={**headers, "Retry-After": str(info['reset'])},
        )

    response = await call_next(request)
    response.headers.update(headers)
    return response
