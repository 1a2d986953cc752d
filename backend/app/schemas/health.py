"""Schemas for the service health endpoint."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List

from pydantic import BaseModel, Field


class SchedulerJobHealth(BaseModel):
    enabled: bool
    last_tick: datetime | None = None
    recent_errors: List[str] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    uptime: float = Field(..., ge=0)
    environment: str
    jobs: Dict[str, SchedulerJobHealth] = Field(default_factory=dict)
