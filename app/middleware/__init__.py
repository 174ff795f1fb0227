"""
Middleware package for vidproxy.

This package contains middleware components for rate limiting and error
handling.
"""

from .error_handler import ErrorHandlingMiddleware
from .rate_limiter import RateLimiter, RateLimitConfig, rate_limit_middleware

__all__ = ['ErrorHandlingMiddleware', 'RateLimiter', 'RateLimitConfig', 'rate_limit_middleware']
