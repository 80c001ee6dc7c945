"""Centralized configuration management for the AssetHub backend."""

from __future__ import annotations

import logging
from functools import lru_cache
from urllib.parse import quote

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from a local .env file before the settings
# singleton is built so every importer observes the same values.
load_dotenv()

# -- Application-wide constants -------------------------------------------------

DEFAULT_SQLITE_DATABASE_URL = "sqlite+aiosqlite:///./data/assethub.db"
POSTGRES_ASYNC_PREFIX = "postgresql+psycopg://"
POSTGRES_SYNC_PREFIXES = ("postgres://", "postgresql://")
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30.0


def _normalize_origin(origin: str) -> str:
    """Return the origin stripped of whitespace and trailing slashes."""

    return origin.strip().rstrip("/")


class AppSettings(BaseSettings):
    """Typed configuration surface built on top of ``pydantic-settings``.

    ``DATABASE_URL`` wins when present.  Otherwise the discrete ``DB_*``
    variables are assembled into a PostgreSQL URL, and ``USE_SQLITE`` forces a
    local SQLite file for development and tests.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    app_env: str = Field(
        default="dev",
        alias="APP_ENV",
        description="Deployment environment name. ``dev`` enables demo seeding.",
    )
    seed: bool = Field(
        default=False,
        alias="SEED",
        description="Seed demo users and assets even outside ``dev``.",
    )
    database_url: str | None = Field(
        default=None,
        alias="DATABASE_URL",
        description=(
            "Full SQLAlchemy-compatible database URL. Postgres URLs supplied in"
            " sync format (postgres:// or postgresql://) are coerced into the"
            " async psycopg driver string at runtime."
        ),
    )
    use_sqlite: bool = Field(
        default=False,
        alias="USE_SQLITE",
        description="Force SQLite usage regardless of DATABASE_URL.",
    )
    db_host: str = Field(default="postgres", alias="DB_HOST")
    db_port: str = Field(default="5432", alias="DB_PORT")
    db_name: str = Field(default="favs", alias="DB_NAME")
    db_user: str = Field(default="app", alias="DB_USER")
    db_pass: str = Field(default="app", alias="DB_PASS")
    db_sslmode: str = Field(default="disable", alias="DB_SSLMODE")
    log_level: str = Field(
        default=DEFAULT_LOG_LEVEL,
        alias="LOG_LEVEL",
        description="Root logging level (e.g. INFO, DEBUG, WARNING).",
    )
    log_path: str | None = Field(
        default=None,
        alias="LOG_PATH",
        description="Directory receiving a size-rotated log file. Unset logs to stderr only.",
    )
    request_timeout_seconds: float = Field(
        default=DEFAULT_REQUEST_TIMEOUT_SECONDS,
        alias="REQUEST_TIMEOUT_SECONDS",
        gt=0,
        description="Deadline applied to every HTTP request before it is cancelled.",
    )
    slow_query_threshold: float = Field(
        default=0.1,
        alias="SLOW_QUERY_THRESHOLD",
        description="Queries slower than this many seconds are logged as warnings.",
    )
    cors_allow_origins_raw: str | None = Field(
        default=None,
        alias="CORS_ALLOW_ORIGINS",
        description="Comma-separated list of additional CORS origins.",
    )

    @property
    def resolved_database_url(self) -> str:
        """Return the async-compatible database URL after applying fallbacks."""

        if self.use_sqlite:
            return DEFAULT_SQLITE_DATABASE_URL

        if not self.database_url:
            return (
                f"{POSTGRES_ASYNC_PREFIX}{quote(self.db_user, safe='')}:"
                f"{quote(self.db_pass, safe='')}@{self.db_host}:{self.db_port}/"
                f"{self.db_name}?sslmode={self.db_sslmode}"
            )

        url = self.database_url.strip()

        for prefix in POSTGRES_SYNC_PREFIXES:
            if url.startswith(prefix):
                return url.replace(prefix, POSTGRES_ASYNC_PREFIX, 1)

        if url.startswith(POSTGRES_ASYNC_PREFIX) or url.startswith("sqlite+aiosqlite://"):
            return url

        raise RuntimeError(
            f"Expected a PostgreSQL connection string or SQLite fallback, received: {url}"
        )

    @property
    def database_type(self) -> str:
        """Return ``sqlite`` when using SQLite otherwise ``postgresql``."""

        if self.resolved_database_url.startswith("sqlite"):
            return "sqlite"
        return "postgresql"

    @property
    def should_seed(self) -> bool:
        return self.seed or self.app_env.strip().lower() == "dev"

    @property
    def cors_allow_origins(self) -> list[str]:
        """Return normalised CORS origins supplied via environment variables."""

        if not self.cors_allow_origins_raw:
            return []

        origins = [
            _normalize_origin(origin)
            for origin in self.cors_allow_origins_raw.split(",")
            if origin.strip()
        ]
        return [origin for origin in origins if origin]

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

        if not self.database_url and not self.use_sqlite:
            warnings.append(
                "DATABASE_URL is not set - connecting with DB_* defaults "
                f"({self.db_host}:{self.db_port}/{self.db_name})"
            )

        if not self.cors_allow_origins:
            warnings.append(
                "CORS_ALLOW_ORIGINS is not set - using default localhost origins only"
            )

        return warnings


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Return a cached instance of :class:`AppSettings`."""

    return AppSettings()


__all__ = [
    "AppSettings",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_REQUEST_TIMEOUT_SECONDS",
    "DEFAULT_SQLITE_DATABASE_URL",
    "POSTGRES_ASYNC_PREFIX",
    "POSTGRES_SYNC_PREFIXES",
    "get_settings",
]
