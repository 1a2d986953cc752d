from __future__ import annotations

from fastapi.testclient import TestClient

from backend.app.config import read_allowed_origins, split_raw_origins
from backend.app.main import create_app

LOCAL_DEVELOPMENT_ORIGIN = "http://localhost:5173"


def test_split_raw_origins_accepts_commas_and_whitespace():
    raw = "http://localhost:5173, http://127.0.0.1:5173 http://0.0.0.0:5173"
    assert split_raw_origins(raw) == [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://0.0.0.0:5173",
    ]


def test_read_allowed_origins_normalizes_and_deduplicates():
    origins = read_allowed_origins(
        ["https://portal.example.org/", "https://portal.example.org", " ", "http://localhost:5173"]
    )

    assert origins == ["http://localhost:5173", "https://portal.example.org"]


def test_settings_from_env_reads_space_separated_origins(monkeypatch):
    from backend.app.config import Settings

    monkeypatch.setenv("BACKEND_ALLOWED_ORIGINS", "http://localhost:5173 http://127.0.0.1:5173")

    assert Settings.from_env().allowed_origins == [
        "http://127.0.0.1:5173",
        "http://localhost:5173",
    ]


def test_schools_endpoint_includes_cors_headers_for_local_dev_origin(client: TestClient):
    response = client.options(
        "/api/schools",
        headers={
            "Origin": LOCAL_DEVELOPMENT_ORIGIN,
            "Access-Control-Request-Method": "GET",
        },
    )

    assert response.status_code == 200
    assert response.headers.get("access-control-allow-origin") == LOCAL_DEVELOPMENT_ORIGIN


def test_production_only_allows_configured_origins(context_factory):
    app = create_app(
        context_factory(environment="production", allowed_origins=["https://portal.example.org"])
    )
    with TestClient(app) as test_client:
        allowed = test_client.options(
            "/api/schools",
            headers={
                "Origin": "https://portal.example.org",
                "Access-Control-Request-Method": "GET",
            },
        )
        rejected = test_client.options(
            "/api/schools",
            headers={
                "Origin": LOCAL_DEVELOPMENT_ORIGIN,
                "Access-Control-Request-Method": "GET",
            },
        )

    assert allowed.headers.get("access-control-allow-origin") == "https://portal.example.org"
    assert rejected.status_code == 400
    assert "access-control-allow-origin" not in rejected.headers
