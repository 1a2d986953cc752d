"""Utility helpers to ensure the database schema is up to date."""

from __future__ import annotations

import errno
import logging
import os
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from . import models  # noqa: F401 - registers the tables on Base.metadata
from .database import Base

LOGGER = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent
LOCK_FILENAME = ".alembic-migration.lock"
LOCK_POLL_SECONDS = 0.25
LOCK_TIMEOUT_ENV = "ALEMBIC_MIGRATION_LOCK_TIMEOUT"
DEFAULT_LOCK_TIMEOUT = 30.0

if os.name == "posix":  # pragma: no cover - platform specific
    import fcntl

    def _try_lock(fd: int) -> None:
        fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)

    def _unlock(fd: int) -> None:
        fcntl.flock(fd, fcntl.LOCK_UN)

else:  # pragma: no cover - platform specific
    import msvcrt

    def _try_lock(fd: int) -> None:
        msvcrt.locking(fd, msvcrt.LK_NBLCK, 1)

    def _unlock(fd: int) -> None:
        msvcrt.locking(fd, msvcrt.LK_UNLCK, 1)


def lock_timeout_from_env() -> float:
    raw = os.getenv(LOCK_TIMEOUT_ENV, "").strip()
    try:
        value = float(raw) if raw else DEFAULT_LOCK_TIMEOUT
    except ValueError:
        value = -1.0
    if value <= 0:
        LOGGER.warning("Ignoring %s=%r; waiting %.1f seconds", LOCK_TIMEOUT_ENV, raw, DEFAULT_LOCK_TIMEOUT)
        return DEFAULT_LOCK_TIMEOUT
    return value


@contextmanager
def migration_lock(path: Path, *, timeout: float) -> Iterator[None]:
    """Hold an exclusive lock on ``path`` so concurrent workers migrate one at a time."""

    path.parent.mkdir(parents=True, exist_ok=True)
    deadline = time.monotonic() + timeout
    with path.open("a+") as handle:
        fd = handle.fileno()
        while True:
            try:
                _try_lock(fd)
                break
            except OSError as error:
                # EACCES/EAGAIN on POSIX; sharing/lock violation (32, 33) on Windows.
                busy = error.errno in {errno.EACCES, errno.EAGAIN, errno.EBUSY} or getattr(
                    error, "winerror", None
                ) in {32, 33}
                if not busy:
                    raise
                if time.monotonic() >= deadline:
                    raise TimeoutError(f"Timed out waiting for migration lock {path}") from error
                time.sleep(LOCK_POLL_SECONDS)
        LOGGER.debug("Holding migration lock %s", path)
        try:
            yield
        finally:
            _unlock(fd)


def build_alembic_config(database_url: str) -> Config:
    config = Config(str(BASE_DIR / "alembic.ini"))
    config.set_main_option("script_location", str(BASE_DIR / "alembic"))
    config.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    return config


def run_database_migrations(database_url: str) -> None:
    """Run Alembic migrations so the required tables exist before serving requests."""

    config = build_alembic_config(database_url)
    LOGGER.info("Running database migrations")

    with migration_lock(BASE_DIR / LOCK_FILENAME, timeout=lock_timeout_from_env()):
        connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
        engine = create_engine(database_url, connect_args=connect_args)
        try:
            inspector = inspect(engine)
            if inspector.has_table("alembic_version"):
                LOGGER.debug("Alembic version table already present; applying migrations if needed")
                command.upgrade(config, "head")
                return

            existing = set(inspector.get_table_names())
            expected = set(Base.metadata.tables)
            if expected and expected.issubset(existing):
                # Schema created outside Alembic (e.g. from the original SQL scripts).
                LOGGER.info("Existing schema matches the models; stamping head without migrating")
                command.stamp(config, "head")
                return

            LOGGER.debug("Running full upgrade")
            command.upgrade(config, "head")
        finally:
            engine.dispose()
