from __future__ import annotations

from fastapi.testclient import TestClient

from taproom.main import app


def test_health_smoke() -> None:
    client = TestClient(app)
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_version_reports_field_map() -> None:
    client = TestClient(app)
    response = client.get("/api/version")
    assert response.status_code == 200
    assert response.json()["pdf_field_map_version"] == "2024.1"


def test_protected_routes_need_a_session() -> None:
    client = TestClient(app)
    assert client.get("/api/v1/schedule/week").status_code == 401
    assert client.get("/api/v1/auth/me").json() == {
        "authenticated": False,
        "id": None,
        "name": None,
        "email": None,
        "is_admin": False,
        "csrf_token": None,
    }
