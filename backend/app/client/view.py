"""In-memory view model that the controller renders into."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Optional

SYNC_PENDING = "Not synced yet"
MAX_RECORDED_ERRORS = 50


@dataclass(frozen=True)
class PageButton:
    label: str
    page: int
    disabled: bool = False
    active: bool = False


@dataclass(frozen=True)
class PaginationView:
    section: str
    previous: PageButton
    pages: list[PageButton]
    next: PageButton
    total_label: str


@dataclass(frozen=True)
class Card:
    """A value/label pair shown as a KPI, status or analytics card."""

    value: str
    label: str
    trend: Optional[str] = None
    positive: bool = True


@dataclass(frozen=True)
class ChartSeries:
    title: str
    labels: list[str]
    values: list[float]


@dataclass
class DashboardView:
    """Everything the dashboard currently displays.

    The controller is the only writer; the poller thread only touches
    ``sync_status``.
    """

    kpi_cards: list[Card] = field(default_factory=list)
    status_cards: list[Card] = field(default_factory=list)
    analytics_cards: dict[str, list[Card]] = field(default_factory=dict)
    tables: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    pagination: dict[str, PaginationView] = field(default_factory=dict)
    charts: dict[str, ChartSeries] = field(default_factory=dict)
    sync_status: str = SYNC_PENDING
    loading: set[str] = field(default_factory=set)
    errors: deque[str] = field(default_factory=lambda: deque(maxlen=MAX_RECORDED_ERRORS))

    def set_loading(self, section: str, is_loading: bool) -> None:
        if is_loading:
            self.loading.add(section)
        else:
            self.loading.discard(section)

    def record_error(self, message: str) -> None:
        self.errors.append(message)

    @property
    def last_error(self) -> Optional[str]:
        return self.errors[-1] if self.errors else None
