"""Environment driven settings for the portal backend and dashboard client."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from sqlalchemy.engine import make_url

_DEFAULT_DB_PATH = Path(__file__).resolve().parent.parent / "school_portal.db"
_DEFAULT_DATABASE_URL = f"sqlite:///{_DEFAULT_DB_PATH.as_posix()}"

ENVIRONMENT_ENV = "APP_ENVIRONMENT"
DATABASE_URL_ENV = "DATABASE_URL"
REQUIRE_POSTGRES_ENV = "REQUIRE_POSTGRES"
POOL_SIZE_ENV = "DATABASE_POOL_SIZE"
POOL_MAX_OVERFLOW_ENV = "DATABASE_MAX_OVERFLOW"
POOL_TIMEOUT_ENV = "DATABASE_POOL_TIMEOUT"
POOL_RECYCLE_ENV = "DATABASE_POOL_RECYCLE"
CONNECT_TIMEOUT_ENV = "DATABASE_CONNECT_TIMEOUT"
ALLOWED_ORIGINS_ENV = "BACKEND_ALLOWED_ORIGINS"
RUN_MIGRATIONS_ENV = "RUN_MIGRATIONS_ON_STARTUP"
MAINTENANCE_SCHEDULER_ENV = "ENABLE_MAINTENANCE_SCHEDULER"
MAINTENANCE_INTERVAL_ENV = "MAINTENANCE_INTERVAL_HOURS"
PORTAL_API_BASE_ENV = "PORTAL_API_BASE"

DEFAULT_ENVIRONMENT = "development"
# pool_size + max_overflow caps the pool at 20 concurrent connections
DEFAULT_POOL_SIZE = 10
DEFAULT_MAX_OVERFLOW = 10
DEFAULT_POOL_TIMEOUT = 30
DEFAULT_POOL_RECYCLE = 1800
DEFAULT_CONNECT_TIMEOUT = 2
DEFAULT_MAINTENANCE_INTERVAL_HOURS = 24
DEFAULT_PORTAL_API_BASE = "http://localhost:3000/api"


def _ensure_directory(path: str | os.PathLike[str]) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)


def _read_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer") from exc
    if value < 0:
        raise ValueError(f"{name} must be non-negative")
    return value


def _read_bool_env(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def split_raw_origins(raw_value: str) -> list[str]:
    """Split a raw origin string using commas or whitespace as separators."""

    return [origin for origin in re.split(r"[\s,]+", raw_value) if origin]


def _normalize_origin(origin: str) -> str | None:
    stripped = origin.strip()
    if not stripped:
        return None
    return stripped.rstrip("/")


def read_allowed_origins(raw_origins: Iterable[str]) -> list[str]:
    normalized = {_normalize_origin(origin) for origin in raw_origins}
    return sorted({origin for origin in normalized if origin})


def resolve_database_url(raw_url: str | None, *, require_postgres: bool = False) -> str:
    if not raw_url:
        if require_postgres:
            raise RuntimeError(
                "DATABASE_URL must be configured for PostgreSQL when REQUIRE_POSTGRES=1"
            )
        _ensure_directory(_DEFAULT_DB_PATH)
        return _DEFAULT_DATABASE_URL

    url = make_url(raw_url)
    if url.drivername.startswith("sqlite") and url.database not in (None, "", ":memory:"):
        _ensure_directory(url.database)
    if require_postgres and url.drivername.startswith("sqlite"):
        raise RuntimeError(
            "SQLite is not permitted when REQUIRE_POSTGRES=1; configure DATABASE_URL"
        )
    return url.render_as_string(hide_password=False)


@dataclass(frozen=True)
class Settings:
    """Runtime configuration resolved once at startup."""

    database_url: str
    environment: str = DEFAULT_ENVIRONMENT
    pool_size: int = DEFAULT_POOL_SIZE
    max_overflow: int = DEFAULT_MAX_OVERFLOW
    pool_timeout: int = DEFAULT_POOL_TIMEOUT
    pool_recycle: int = DEFAULT_POOL_RECYCLE
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT
    allowed_origins: list[str] = field(default_factory=list)
    run_migrations: bool = True
    maintenance_scheduler: bool = False
    maintenance_interval_hours: int = DEFAULT_MAINTENANCE_INTERVAL_HOURS

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @classmethod
    def from_env(cls) -> "Settings":
        require_postgres = _read_bool_env(REQUIRE_POSTGRES_ENV, False)
        raw_origins = os.getenv(ALLOWED_ORIGINS_ENV) or ""
        return cls(
            database_url=resolve_database_url(
                os.getenv(DATABASE_URL_ENV), require_postgres=require_postgres
            ),
            environment=(os.getenv(ENVIRONMENT_ENV) or DEFAULT_ENVIRONMENT).strip().lower(),
            pool_size=_read_int_env(POOL_SIZE_ENV, DEFAULT_POOL_SIZE),
            max_overflow=_read_int_env(POOL_MAX_OVERFLOW_ENV, DEFAULT_MAX_OVERFLOW),
            pool_timeout=_read_int_env(POOL_TIMEOUT_ENV, DEFAULT_POOL_TIMEOUT),
            pool_recycle=_read_int_env(POOL_RECYCLE_ENV, DEFAULT_POOL_RECYCLE),
            connect_timeout=_read_int_env(CONNECT_TIMEOUT_ENV, DEFAULT_CONNECT_TIMEOUT),
            allowed_origins=read_allowed_origins(split_raw_origins(raw_origins)),
            run_migrations=_read_bool_env(RUN_MIGRATIONS_ENV, True),
            maintenance_scheduler=_read_bool_env(MAINTENANCE_SCHEDULER_ENV, False),
            maintenance_interval_hours=_read_int_env(
                MAINTENANCE_INTERVAL_ENV, DEFAULT_MAINTENANCE_INTERVAL_HOURS
            ),
        )


def read_portal_api_base() -> str:
    raw = os.getenv(PORTAL_API_BASE_ENV)
    if not raw or not raw.strip():
        return DEFAULT_PORTAL_API_BASE
    return raw.strip().rstrip("/")
