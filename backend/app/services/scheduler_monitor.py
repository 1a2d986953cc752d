"""Centralised scheduler health tracking utilities."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, MutableMapping

JOB_MAINTENANCE = "database_maintenance"


@dataclass
class JobStatus:
    """Runtime status information for a scheduled job."""

    enabled: bool = True
    last_tick: datetime | None = None
    recent_errors: deque[str] = field(default_factory=lambda: deque(maxlen=10))


class SchedulerMonitor:
    """Thread-safe tracker for background job health, owned by the application context."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._jobs: Dict[str, JobStatus] = {}

    def set_job_enabled(self, job_name: str, enabled: bool) -> None:
        with self._lock:
            status = self._jobs.get(job_name, JobStatus())
            status.enabled = enabled
            self._jobs[job_name] = status

    def record_tick(self, job_name: str) -> None:
        with self._lock:
            status = self._jobs.get(job_name, JobStatus())
            status.last_tick = datetime.now(timezone.utc)
            self._jobs[job_name] = status

    def record_error(self, job_name: str, message: str) -> None:
        timestamped = f"{datetime.now(timezone.utc).isoformat()} - {message}"
        with self._lock:
            status = self._jobs.get(job_name, JobStatus())
            status.recent_errors.append(timestamped)
            self._jobs[job_name] = status

    def snapshot(self) -> MutableMapping[str, dict[str, object]]:
        with self._lock:
            return {
                name: {
                    "enabled": status.enabled,
                    "last_tick": status.last_tick,
                    "recent_errors": list(status.recent_errors),
                }
                for name, status in self._jobs.items()
            }

    def reset(self) -> None:
        with self._lock:
            self._jobs.clear()
