"""Application context shared by the API collaborators."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from .config import Settings
from .database import build_engine, build_session_factory
from .services.scheduler_monitor import SchedulerMonitor


@dataclass
class AppContext:
    """Everything a request handler or background job needs, built once at startup."""

    settings: Settings
    engine: Engine
    session_factory: sessionmaker
    scheduler_monitor: SchedulerMonitor = field(default_factory=SchedulerMonitor)
    started_at: float = field(default_factory=time.monotonic)

    @classmethod
    def from_settings(cls, settings: Settings, *, engine: Optional[Engine] = None) -> "AppContext":
        engine = engine if engine is not None else build_engine(settings)
        return cls(
            settings=settings,
            engine=engine,
            session_factory=build_session_factory(engine),
        )

    @property
    def uptime(self) -> float:
        return time.monotonic() - self.started_at

    def dispose(self) -> None:
        self.engine.dispose()
