"""Section navigation, loading and refresh logic for the dashboard client."""

from __future__ import annotations

import json
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional
from urllib.parse import urlencode

from . import render
from .api import PortalApiClient
from .cache import DEFAULT_TTL, FetchCache
from .poller import DEFAULT_INTERVAL, DEFAULT_RETRY_DELAY, DashboardPoller
from .view import DashboardView

LOGGER = logging.getLogger(__name__)

DASHBOARD = "dashboard"
SCHOOLS = "schools"
STUDENTS = "students"
ANALYTICS = "analytics"
SECTIONS = (DASHBOARD, SCHOOLS, STUDENTS, ANALYTICS)
PAGED_SECTIONS = (SCHOOLS, STUDENTS)

SCHOOLS_PAGE_LIMIT = 20
STUDENTS_PAGE_LIMIT = 50
LIVE_STATS_TTL = 5.0
LIVE_KPIS_TTL = 10.0

STATS_ENDPOINT = "/dashboard/stats"
KPIS_ENDPOINT = "/dashboard/kpis"


@dataclass
class DashboardState:
    """Navigation state owned by a single controller."""

    active_section: str = DASHBOARD
    current_page: dict[str, int] = field(
        default_factory=lambda: {SCHOOLS: 1, STUDENTS: 1}
    )
    filters: dict[str, dict[str, Any]] = field(
        default_factory=lambda: {SCHOOLS: {}, STUDENTS: {}}
    )


def _query_string(params: dict[str, Any]) -> str:
    return urlencode({key: value for key, value in params.items() if value not in (None, "")})


class PortalController:
    """Drive the dashboard: switch sections, load and render data, keep it fresh.

    Public entry points never raise on API failures; they log the problem,
    record it on the view and return ``False`` so the caller's loop survives.
    """

    def __init__(
        self,
        api: Optional[PortalApiClient] = None,
        *,
        cache: Optional[FetchCache] = None,
        view: Optional[DashboardView] = None,
        poll_interval: float = DEFAULT_INTERVAL,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        max_retries: Optional[int] = None,
        max_workers: int = 4,
    ) -> None:
        self.api = api or PortalApiClient()
        self.cache = cache or FetchCache(self.api.fetch_api)
        self.view = view or DashboardView()
        self.state = DashboardState()
        self.poller = DashboardPoller(
            self.refresh_dashboard_live,
            self.view,
            interval=poll_interval,
            retry_delay=retry_delay,
            max_retries=max_retries,
        )
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="portal-client"
        )
        self._render_lock = threading.RLock()
        self._started_at = time.monotonic()
        self._destroyed = False

    # Navigation -----------------------------------------------------------

    def show_section(self, section: str) -> bool:
        if section not in SECTIONS:
            raise ValueError(f"Unknown section: {section}")
        self.state.active_section = section

        if section == DASHBOARD:
            loaded = self.load_dashboard()
            self.poller.start()
            return loaded

        self.poller.stop()
        if section == SCHOOLS:
            return self.load_schools()
        if section == STUDENTS:
            return self.load_students()
        return self.load_analytics()

    # Loading --------------------------------------------------------------

    def _gather(self, *calls: Callable[[], Any]) -> list[Any]:
        """Run ``calls`` in parallel and return their results once all finished."""

        futures = [self._executor.submit(call) for call in calls]
        wait(futures)
        return [future.result() for future in futures]

    def _guarded(self, section: str, message: str, load: Callable[[], None]) -> bool:
        self.view.set_loading(section, True)
        try:
            load()
            return True
        except Exception as exc:
            LOGGER.error("%s: %s", message, exc)
            self.view.record_error(f"{message}: {exc}")
            return False
        finally:
            self.view.set_loading(section, False)

    def _load_dashboard(self, *, stats_ttl: float, kpis_ttl: float) -> None:
        stats, kpis = self._gather(
            lambda: self.cache.fetch(STATS_ENDPOINT, stats_ttl),
            lambda: self.cache.fetch(KPIS_ENDPOINT, kpis_ttl),
        )
        stats_data, kpis_data = stats["data"], kpis["data"]
        with self._render_lock:
            self.view.kpi_cards = render.render_kpi_cards(stats_data)
            self.view.status_cards = render.render_system_status(stats_data, kpis_data)
            self.view.charts["enrollment"] = render.render_enrollment_chart(kpis_data)
            self.view.charts["district"] = render.render_district_chart(stats_data)
            self.view.sync_status = f"Last sync: {datetime.now():%H:%M:%S}"

    def load_dashboard(self) -> bool:
        return self._guarded(
            DASHBOARD,
            "Failed to load dashboard",
            lambda: self._load_dashboard(stats_ttl=DEFAULT_TTL, kpis_ttl=DEFAULT_TTL),
        )

    def _load_page(self, section: str, endpoint: str, limit: int, render_rows) -> None:
        params = {"page": self.state.current_page[section], "limit": limit}
        params.update(self.state.filters[section])
        response = self.api.fetch_api(f"{endpoint}?{_query_string(params)}")
        with self._render_lock:
            self.view.tables[section] = render_rows(response["data"])
            self.view.pagination[section] = render.render_pagination(
                section, response["pagination"]
            )

    def load_schools(self) -> bool:
        return self._guarded(
            SCHOOLS,
            "Failed to load schools",
            lambda: self._load_page(
                SCHOOLS, "/schools", SCHOOLS_PAGE_LIMIT, render.render_school_rows
            ),
        )

    def load_students(self) -> bool:
        return self._guarded(
            STUDENTS,
            "Failed to load students",
            lambda: self._load_page(
                STUDENTS, "/students", STUDENTS_PAGE_LIMIT, render.render_student_rows
            ),
        )

    def _load_analytics(self) -> None:
        kpis, health = self._gather(
            lambda: self.cache.fetch(KPIS_ENDPOINT),
            self.api.fetch_health,
        )
        with self._render_lock:
            self.view.analytics_cards = render.render_analytics(kpis["data"], health)

    def load_analytics(self) -> bool:
        return self._guarded(ANALYTICS, "Failed to load analytics", self._load_analytics)

    # Paging and search ----------------------------------------------------

    def _reload(self, section: str) -> bool:
        if section == SCHOOLS:
            return self.load_schools()
        return self.load_students()

    def change_page(self, section: str, page: int) -> bool:
        """Select ``page`` for ``section`` and reload it."""

        if section not in PAGED_SECTIONS:
            raise ValueError(f"Section {section} is not paginated")
        self.state.current_page[section] = max(int(page), 1)
        return self._reload(section)

    def search_schools(
        self, search: Optional[str] = None, *, district_id: Optional[int] = None
    ) -> bool:
        self.state.filters[SCHOOLS] = {"search": search, "district_id": district_id}
        return self.change_page(SCHOOLS, 1)

    def search_students(
        self,
        search: Optional[str] = None,
        *,
        school_id: Optional[int] = None,
        class_number: Optional[int] = None,
    ) -> bool:
        self.state.filters[STUDENTS] = {
            "search": search,
            "school_id": school_id,
            "class_number": class_number,
        }
        return self.change_page(STUDENTS, 1)

    # Refresh --------------------------------------------------------------

    def refresh_current_section(self) -> bool:
        self.cache.clear()
        return self.show_section(self.state.active_section)

    def refresh_dashboard_live(self) -> None:
        """Poller callback. Raises on failure so the poller can schedule a retry."""

        if self.state.active_section != DASHBOARD:
            return
        self._load_dashboard(stats_ttl=LIVE_STATS_TTL, kpis_ttl=LIVE_KPIS_TTL)

    # Lifecycle ------------------------------------------------------------

    def export_dashboard_data(self, path: Optional[Path] = None) -> Optional[Path]:
        """Write a JSON snapshot of the dashboard; returns the file written."""

        now = datetime.now(timezone.utc)
        target = Path(path) if path else Path(f"dashboard-export-{date.today().isoformat()}.json")
        with self._render_lock:
            payload = {
                "timestamp": now.isoformat(),
                "active_section": self.state.active_section,
                "charts": sorted(self.view.charts),
                "kpi_cards": [asdict(card) for card in self.view.kpi_cards],
                "sync_status": self.view.sync_status,
                "uptime": round(time.monotonic() - self._started_at, 3),
            }
        try:
            target.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as exc:
            LOGGER.error("Failed to export dashboard data to %s: %s", target, exc)
            self.view.record_error(f"Failed to export dashboard data: {exc}")
            return None
        LOGGER.info("Dashboard data exported to %s", target)
        return target

    def destroy(self) -> None:
        if self._destroyed:
            return
        self._destroyed = True
        self.poller.stop()
        with self._render_lock:
            self.view.charts.clear()
        self._executor.shutdown(wait=False)
        self.api.close()
