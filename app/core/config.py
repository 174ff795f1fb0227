"""
Configuration management for the vidproxy application.
"""
import os
from typing import Mapping, Optional


def _get_bool(env: Mapping[str, str], key: str, default: str) -> bool:
    return env.get(key, default).lower() == "true"


class Settings:
    """Application settings, built once at startup from environment variables."""

    def __init__(
        self,
        host: str = "0.0.0.0",
        port: int = 3000,
        environment: str = "production",
        rate_limit_window_minutes: int = 15,
        rate_limit_max: int = 100,
        rate_limit_enabled: bool = True,
        redis_url: Optional[str] = None,
        static_dir: str = "public",
        log_level: str = "INFO",
        api_version: str = "1.0",
        api_creator: str = "vidproxy",
        short_link_timeout: float = 3.0,
        upstream_timeout: float = 5.0,
        youtube_timeout: float = 30.0,
    ):
        # Server
        self.host = host
        self.port = port
        self.environment = environment

        # Rate limiting
        self.rate_limit_window_minutes = rate_limit_window_minutes
        self.rate_limit_max = rate_limit_max
        self.rate_limit_enabled = rate_limit_enabled
        self.redis_url = redis_url

        # Static front-end
        self.static_dir = static_dir

        self.log_level = log_level

        # Response meta block
        self.api_version = api_version
        self.api_creator = api_creator

        # Outbound timeouts (seconds)
        self.short_link_timeout = short_link_timeout
        self.upstream_timeout = upstream_timeout
        self.youtube_timeout = youtube_timeout

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from a mapping of environment variables (``os.environ`` by default)."""
        env = os.environ if env is None else env
        return cls(
            host=env.get("HOST", "0.0.0.0"),
            port=int(env.get("PORT", "3000")),
            environment=env.get("ENVIRONMENT", "production").lower(),
            rate_limit_window_minutes=int(env.get("RATE_LIMIT_WINDOW", "15")),
            rate_limit_max=int(env.get("RATE_LIMIT_MAX", "100")),
            rate_limit_enabled=_get_bool(env, "RATE_LIMIT_ENABLED", "true"),
            redis_url=env.get("REDIS_URL") or None,
            static_dir=env.get("STATIC_DIR", "public"),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            api_version=env.get("API_VERSION", "1.0"),
            api_creator=env.get("API_CREATOR", "vidproxy"),
            short_link_timeout=float(env.get("SHORT_LINK_TIMEOUT", "3.0")),
            upstream_timeout=float(env.get("UPSTREAM_TIMEOUT", "5.0")),
            youtube_timeout=float(env.get("YOUTUBE_TIMEOUT", "30.0")),
        )

    @property
    def debug(self) -> bool:
        """Whether error responses may carry stack traces."""
        return self.environment == "development"

    @property
    def rate_limit_window_seconds(self) -> int:
        return self.rate_limit_window_minutes * 60

    def __repr__(self) -> str:
        return (
            f"Settings(environment={self.environment!r}, port={self.port}, "
            f"rate_limit={self.rate_limit_max}/{self.rate_limit_window_minutes}min)"
        )
