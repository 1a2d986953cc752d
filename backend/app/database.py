"""Database configuration for the FastAPI backend."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Dict, Generator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import Settings

Base = declarative_base()


def engine_options(settings: Settings) -> Dict[str, Any]:
    """Return ``create_engine`` keyword arguments for the configured database."""

    if settings.database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_size": settings.pool_size,
        "max_overflow": settings.max_overflow,
        "pool_timeout": settings.pool_timeout,
        "pool_recycle": settings.pool_recycle,
        "connect_args": {"connect_timeout": settings.connect_timeout},
    }


def build_engine(settings: Settings) -> Engine:
    return create_engine(settings.database_url, **engine_options(settings))


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request) -> Generator[Session, None, None]:
    """Yield a database session from the application context and close it afterwards."""
    db = request.app.state.context.session_factory()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope(session_factory: Callable[[], Session]) -> Generator[Session, None, None]:
    """Provide a transactional scope for operations outside of FastAPI dependencies."""
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
