"""Centralized configuration management for the voting system."""

from __future__ import annotations

import logging
import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field, PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables defined in a local .env file before instantiating the
# settings singleton so every consumer of :mod:`voting_system.settings` observes the
# same values as the FastAPI entry point.
load_dotenv()

# -- Application-wide constants -------------------------------------------------

DEFAULT_SQLITE_DATABASE_URL = "sqlite+aiosqlite:///./data/votes.db"
POSTGRES_ASYNC_PREFIX = "postgresql+psycopg://"
POSTGRES_SYNC_PREFIXES = ("postgres://", "postgresql://")
SQLITE_ASYNC_PREFIX = "sqlite+aiosqlite://"
DEFAULT_REDIS_URL = "redis://localhost:6379/0"
DEFAULT_REDIS_RETRY_BACKOFF_SECONDS = 30.0
DEFAULT_REDIS_SOCKET_TIMEOUT_SECONDS = 1.0
DEFAULT_CACHE_PREFIX = "voting_system:"
DEFAULT_VOTE_CACHE_TTL_SECONDS = 3600
DEFAULT_COLLECTION_CACHE_TTL_SECONDS = 1800
DEFAULT_LOG_LEVEL = "INFO"


class AppSettings(BaseSettings):
    """Typed configuration surface built on top of ``pydantic-settings``.

    Besides the raw environment values the class exposes a couple of derived
    helpers (normalised database URL, numeric log level) so that the database
    and cache modules never have to repeat parsing logic.
    """

    _explicit_redis_url: bool = PrivateAttr(default=False)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    def __init__(self, **values: object) -> None:  # noqa: D401 - short override explanation
        """Remember whether ``REDIS_URL`` was supplied explicitly."""

        normalized_keys = {str(key).lower() for key in values}
        super().__init__(**values)
        self._explicit_redis_url = "redis_url" in normalized_keys
        redis_env = os.getenv("REDIS_URL")
        if redis_env is not None and redis_env.strip():
            self._explicit_redis_url = True

    database_url: str | None = Field(
        default=None,
        alias="DATABASE_URL",
        description=(
            "SQLAlchemy-compatible database URL. Postgres URLs supplied in sync"
            " format (postgres:// or postgresql://) are coerced into the async"
            " psycopg driver string at runtime."
        ),
    )
    redis_url: str = Field(
        default=DEFAULT_REDIS_URL,
        alias="REDIS_URL",
        description="Redis connection string used by the cache tier.",
    )
    redis_retry_backoff_seconds: float = Field(
        default=DEFAULT_REDIS_RETRY_BACKOFF_SECONDS,
        alias="REDIS_RETRY_BACKOFF_SECONDS",
        description="Cooldown duration applied after Redis connection failures.",
    )
    redis_socket_timeout_seconds: float = Field(
        default=DEFAULT_REDIS_SOCKET_TIMEOUT_SECONDS,
        alias="REDIS_SOCKET_TIMEOUT_SECONDS",
        description="Upper bound for a single Redis round trip, connect included.",
    )
    cache_prefix: str = Field(
        default=DEFAULT_CACHE_PREFIX,
        alias="CACHE_PREFIX",
        description=(
            "Namespace prepended to every cache key so vote data never collides"
            " with unrelated entries sharing the same Redis database."
        ),
    )
    vote_cache_ttl_seconds: int = Field(
        default=DEFAULT_VOTE_CACHE_TTL_SECONDS,
        alias="VOTE_CACHE_TTL_SECONDS",
        gt=0,
        description="Lifetime of a cached per-item vote aggregate.",
    )
    collection_cache_ttl_seconds: int = Field(
        default=DEFAULT_COLLECTION_CACHE_TTL_SECONDS,
        alias="COLLECTION_CACHE_TTL_SECONDS",
        gt=0,
        description="Lifetime of a cached sorted listing snapshot.",
    )
    cors_allow_origins_raw: str | None = Field(
        default=None,
        alias="CORS_ALLOW_ORIGINS",
        description="Comma-separated list of CORS origins allowed to call the API.",
    )
    log_level: str = Field(
        default=DEFAULT_LOG_LEVEL,
        alias="LOG_LEVEL",
        description="Root logging level (e.g. INFO, DEBUG, WARNING).",
    )

    @property
    def resolved_database_url(self) -> str:
        """Return the async-compatible database URL after applying fallbacks."""

        if not self.database_url or not self.database_url.strip():
            return DEFAULT_SQLITE_DATABASE_URL

        url = self.database_url.strip()

        for prefix in POSTGRES_SYNC_PREFIXES:
            if url.startswith(prefix):
                return url.replace(prefix, POSTGRES_ASYNC_PREFIX, 1)

        if url.startswith(POSTGRES_ASYNC_PREFIX) or url.startswith(SQLITE_ASYNC_PREFIX):
            return url

        raise RuntimeError(
            f"Expected a PostgreSQL or aiosqlite connection string, received: {url}"
        )

    @property
    def database_type(self) -> str:
        """Return ``sqlite`` when using SQLite otherwise ``postgresql``."""

        if self.resolved_database_url.startswith("sqlite"):
            return "sqlite"
        return "postgresql"

    @property
    def cors_allow_origins(self) -> list[str]:
        """Return normalised CORS origins supplied via environment variables."""

        if not self.cors_allow_origins_raw:
            return []
        return [
            origin.strip().rstrip("/")
            for origin in self.cors_allow_origins_raw.split(",")
            if origin.strip()
        ]

    @property
    def log_level_numeric(self) -> int:
        """Translate ``log_level`` into the numeric constant expected by logging."""

        candidate = logging.getLevelName(self.log_level.upper())
        if isinstance(candidate, int):
            return candidate
        return logging.INFO

    def optional_config_warnings(self) -> list[str]:
        """Return human-readable warnings for unset optional configuration."""

        warnings: list[str] = []

        if not self.database_url:
            warnings.append(
                "DATABASE_URL is not set - using the local SQLite database "
                f"({DEFAULT_SQLITE_DATABASE_URL})"
            )

        if not self._explicit_redis_url and self.redis_url == DEFAULT_REDIS_URL:
            warnings.append(
                "REDIS_URL is not set - vote caching will target localhost and "
                "fall back to the database when Redis is unreachable"
            )

        return warnings


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Return a cached instance of :class:`AppSettings`."""

    return AppSettings()


__all__ = [
    "AppSettings",
    "DEFAULT_CACHE_PREFIX",
    "DEFAULT_COLLECTION_CACHE_TTL_SECONDS",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_REDIS_RETRY_BACKOFF_SECONDS",
    "DEFAULT_REDIS_SOCKET_TIMEOUT_SECONDS",
    "DEFAULT_REDIS_URL",
    "DEFAULT_SQLITE_DATABASE_URL",
    "DEFAULT_VOTE_CACHE_TTL_SECONDS",
    "get_settings",
]
