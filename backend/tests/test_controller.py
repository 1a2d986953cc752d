from __future__ import annotations

import json
from typing import Generator

import httpx
import pytest
from fastapi.testclient import TestClient

from backend.app.client import FetchCache, PortalApiClient, PortalApiError, PortalController

API_BASE = "http://portal.test/api"


class FakePortalApi:
    """Serves canned API responses and records every request."""

    def __init__(self, stats: dict, kpis: dict) -> None:
        self.stats = stats
        self.kpis = kpis
        self.requests: list[httpx.Request] = []
        self.failing: set[str] = set()

    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path in self.failing:
            return httpx.Response(503, json={"success": False, "error": "Service unavailable"})
        if path == "/api/dashboard/stats":
            return httpx.Response(200, json={"success": True, "data": self.stats})
        if path == "/api/dashboard/kpis":
            return httpx.Response(200, json={"success": True, "data": self.kpis})
        if path == "/health":
            return httpx.Response(200, json={"status": "OK", "uptime": 3600.0})
        if path in ("/api/schools", "/api/students"):
            page = int(request.url.params["page"])
            limit = int(request.url.params["limit"])
            rows = _school_rows() if path == "/api/schools" else _student_rows()
            return httpx.Response(
                200,
                json={
                    "success": True,
                    "data": rows,
                    "pagination": {"page": page, "limit": limit, "total": 45, "pages": 3},
                },
            )
        return httpx.Response(404, json={"success": False, "error": "Route not found"})


def _school_rows() -> list[dict]:
    return [
        {
            "school_code": "OD-KHU-001",
            "name": "Government High School Bhubaneswar",
            "district_name": "Khurda",
            "total_students": 620,
            "total_teachers": 25,
            "status": "Active",
        }
    ]


def _student_rows() -> list[dict]:
    return [
        {
            "admission_no": "ADM-1001",
            "first_name": "Aarav",
            "last_name": "Mohanty",
            "class_number": 9,
            "section": "A",
            "school_name": "Government High School Bhubaneswar",
            "guardian_name": "Sanjay Mohanty",
            "status": "Active",
        }
    ]


@pytest.fixture
def fake_api(sample_stats: dict, sample_kpis: dict) -> FakePortalApi:
    return FakePortalApi(sample_stats, sample_kpis)


@pytest.fixture
def controller(fake_api: FakePortalApi, clock) -> Generator[PortalController, None, None]:
    http_client = httpx.Client(transport=httpx.MockTransport(fake_api.handler))
    api = PortalApiClient(API_BASE, client=http_client)
    controller = PortalController(api, cache=FetchCache(api.fetch_api, clock=clock))
    try:
        yield controller
    finally:
        controller.destroy()
        http_client.close()


def test_dashboard_section_renders_and_starts_poller(controller: PortalController):
    assert controller.show_section("dashboard") is True

    view = controller.view
    assert [card.value for card in view.kpi_cards] == ["1,250", "48,230", "2,100", "30"]
    assert set(view.charts) == {"enrollment", "district"}
    assert view.sync_status.startswith("Last sync: ")
    assert view.loading == set()
    assert controller.poller.running


def test_leaving_dashboard_stops_poller(controller: PortalController, fake_api: FakePortalApi):
    controller.show_section("dashboard")

    assert controller.show_section("schools") is True

    assert not controller.poller.running
    assert controller.state.active_section == "schools"
    assert controller.view.tables["schools"][0]["school_code"] == "OD-KHU-001"
    assert controller.view.pagination["schools"].total_label == "Total: 45"
    request = fake_api.requests[-1]
    assert request.url.params["page"] == "1"
    assert request.url.params["limit"] == "20"


def test_change_page_reloads_section(controller: PortalController, fake_api: FakePortalApi):
    assert controller.change_page("students", 2) is True

    assert controller.state.current_page["students"] == 2
    request = fake_api.requests[-1]
    assert request.url.path == "/api/students"
    assert request.url.params["page"] == "2"
    assert request.url.params["limit"] == "50"
    pagination = controller.view.pagination["students"]
    assert [button.active for button in pagination.pages] == [False, True, False]


def test_search_resets_page_and_sends_filters(controller: PortalController, fake_api: FakePortalApi):
    controller.change_page("schools", 3)

    controller.search_schools("jatni", district_id=4)

    assert controller.state.current_page["schools"] == 1
    params = fake_api.requests[-1].url.params
    assert params["page"] == "1"
    assert params["search"] == "jatni"
    assert params["district_id"] == "4"

    controller.search_students(class_number=9)
    params = fake_api.requests[-1].url.params
    assert params["class_number"] == "9"
    assert "search" not in params and "school_id" not in params


def test_change_page_rejects_sections_without_pagination(controller: PortalController):
    with pytest.raises(ValueError):
        controller.change_page("dashboard", 2)
    with pytest.raises(ValueError):
        controller.show_section("settings")


def test_failed_load_is_recorded_and_does_not_raise(
    controller: PortalController, fake_api: FakePortalApi
):
    fake_api.failing.add("/api/dashboard/stats")

    assert controller.load_dashboard() is False

    assert controller.view.last_error.startswith("Failed to load dashboard: HTTP 503")
    assert controller.view.loading == set()
    assert controller.view.kpi_cards == []


def test_dashboard_reuses_cached_responses_until_manual_refresh(
    controller: PortalController, fake_api: FakePortalApi
):
    controller.load_dashboard()
    controller.load_dashboard()
    assert fake_api.paths().count("/api/dashboard/stats") == 1

    controller.refresh_current_section()

    assert fake_api.paths().count("/api/dashboard/stats") == 2
    assert fake_api.paths().count("/api/dashboard/kpis") == 2


def test_live_refresh_uses_short_ttls(
    controller: PortalController, fake_api: FakePortalApi, clock
):
    controller.load_dashboard()
    clock.advance(6)

    controller.refresh_dashboard_live()

    assert fake_api.paths().count("/api/dashboard/stats") == 2
    assert fake_api.paths().count("/api/dashboard/kpis") == 1

    clock.advance(5)
    controller.refresh_dashboard_live()
    assert fake_api.paths().count("/api/dashboard/kpis") == 2


def test_live_refresh_is_gated_on_active_section(
    controller: PortalController, fake_api: FakePortalApi
):
    controller.state.active_section = "students"

    controller.refresh_dashboard_live()

    assert fake_api.requests == []


def test_live_refresh_failure_propagates_to_poller(
    controller: PortalController, fake_api: FakePortalApi
):
    fake_api.failing.add("/api/dashboard/kpis")

    with pytest.raises(PortalApiError):
        controller.refresh_dashboard_live()

    assert controller.poller.run_cycle() == controller.poller.retry_delay
    assert controller.view.sync_status == "Sync failed - Retrying..."


def test_analytics_section_uses_kpis_and_health(controller: PortalController):
    assert controller.show_section("analytics") is True

    cards = controller.view.analytics_cards
    assert [card.value for card in cards["performance"]] == ["1.0h", "OK"]
    assert cards["school_metrics"][2].value == "42"


def test_export_dashboard_data_writes_json(controller: PortalController, tmp_path):
    controller.load_dashboard()
    target = tmp_path / "export.json"

    assert controller.export_dashboard_data(target) == target

    payload = json.loads(target.read_text(encoding="utf-8"))
    assert payload["charts"] == ["district", "enrollment"]
    assert payload["active_section"] == "dashboard"
    assert payload["kpi_cards"][0]["label"] == "Total Schools"


def test_export_failure_is_recorded(controller: PortalController, tmp_path):
    assert controller.export_dashboard_data(tmp_path / "missing" / "export.json") is None
    assert controller.view.last_error.startswith("Failed to export dashboard data")


def test_destroy_is_idempotent(controller: PortalController):
    controller.show_section("dashboard")

    controller.destroy()
    controller.destroy()

    assert not controller.poller.running
    assert controller.view.charts == {}


def test_transport_errors_become_portal_api_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    api = PortalApiClient(API_BASE, client=httpx.Client(transport=httpx.MockTransport(handler)))

    with pytest.raises(PortalApiError):
        api.fetch_api("/schools")


def test_server_root_strips_api_prefix():
    api = PortalApiClient("http://localhost:3000/api/", client=httpx.Client())

    assert api.url_for("schools") == "http://localhost:3000/api/schools"
    assert api.server_root == "http://localhost:3000"


def test_controller_against_running_api(client: TestClient, seed_portal_data):
    controller = PortalController(PortalApiClient("http://testserver/api", client=client))
    try:
        assert controller.show_section("schools") is True
        assert controller.search_students("priya") is True
    finally:
        controller.destroy()

    assert [row["school_code"] for row in controller.view.tables["schools"]] == [
        "OD-KHU-001",
        "OD-KHU-002",
        "OD-CTC-001",
    ]
    assert controller.view.pagination["schools"].total_label == "Total: 3"
    assert [row["name"] for row in controller.view.tables["students"]] == ["Priya Sahoo"]
