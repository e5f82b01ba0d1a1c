from __future__ import annotations

from datetime import date

from fastapi import FastAPI
from fastapi.testclient import TestClient

from taproom.api.deps import require_admin, require_user
from taproom.api.v1 import employees, events
from taproom.db.models import EventAssignment, Shift
from taproom.db.session import get_db
from taproom.security.csrf import require_csrf


def _client(session_local) -> TestClient:
    app = FastAPI()
    app.include_router(employees.router)
    app.include_router(events.router)

    def override_db():
        db = session_local()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[require_admin] = lambda: {"ok": True}
    app.dependency_overrides[require_user] = lambda: {"ok": True}
    app.dependency_overrides[require_csrf] = lambda: None
    return TestClient(app)


def test_employee_crud_smoke(session_local) -> None:
    client = _client(session_local)

    created = client.post("/api/v1/employees", json={"name": "  Ann  ", "email": "Ann@Example.com "})
    assert created.status_code == 200
    ann = created.json()
    assert ann["name"] == "Ann"
    assert ann["email"] == "ann@example.com"

    client.post("/api/v1/employees", json={"name": "Bob"})
    listing = client.get("/api/v1/employees").json()["employees"]
    assert [e["name"] for e in listing] == ["Ann", "Bob"]

    updated = client.put(f"/api/v1/employees/{ann['id']}", json={"phone": "555-0100", "is_admin": True})
    assert updated.status_code == 200
    assert updated.json()["phone"] == "555-0100"
    assert updated.json()["is_admin"] is True

    assert client.put("/api/v1/employees/999", json={"phone": "x"}).status_code == 404


def test_duplicate_email_is_409(session_local) -> None:
    client = _client(session_local)
    assert client.post("/api/v1/employees", json={"name": "Ann", "email": "ann@example.com"}).status_code == 200
    r = client.post("/api/v1/employees", json={"name": "Other Ann", "email": "ANN@example.com"})
    assert r.status_code == 409


def test_delete_keeps_shift_history_and_drops_assignments(session_local) -> None:
    client = _client(session_local)
    ann_id = client.post("/api/v1/employees", json={"name": "Ann"}).json()["id"]
    event = client.post(
        "/api/v1/events",
        json={"title": "Pint Night", "date": "2024-07-03", "event_type": "pint_night", "employee_ids": [ann_id]},
    )
    assert event.status_code == 200
    with session_local() as db:
        db.add(Shift(employee_id=ann_id, employee_name="Ann", day="MON", date=date(2024, 7, 1), shift="11-Close"))
        db.commit()

    assert client.delete(f"/api/v1/employees/{ann_id}").status_code == 200
    assert client.delete(f"/api/v1/employees/{ann_id}").status_code == 404

    with session_local() as db:
        assert db.query(EventAssignment).count() == 0
        shift = db.query(Shift).one()
        assert shift.employee_name == "Ann"
        assert shift.employee_id is None

    staff = client.get(f"/api/v1/events/{event.json()['id']}").json()["staff"]
    assert staff == []
