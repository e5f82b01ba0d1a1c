from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from taproom.api.deps import require_admin, require_user
from taproom.api.v1 import events, schedule
from taproom.db.models import Employee, EventAssignment, EventBeer, Shift
from taproom.db.session import get_db
from taproom.security.csrf import require_csrf


def _build_client(TestingSessionLocal: sessionmaker[Session]) -> TestClient:
    app = FastAPI()
    app.include_router(events.router)
    app.include_router(schedule.router)

    def override_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[require_admin] = lambda: {"ok": True}
    app.dependency_overrides[require_user] = lambda: {"ok": True}
    app.dependency_overrides[require_csrf] = lambda: None
    return TestClient(app)


def _seed_staff(session_local) -> tuple[int, int]:
    with session_local() as db:
        a, b = Employee(name="Ann"), Employee(name="Bob")
        db.add_all([a, b])
        db.commit()
        return a.id, b.id


def _event_body(**overrides):
    body = {
        "title": "Summer Fest",
        "date": "2024-07-04",
        "time": "13:05",
        "setup_time": "12:00",
        "event_type": "beer_fest",
        "contact_name": "Pat",
        "contact_phone": "555-0100",
        "supplies": {"table_needed": True, "ice": True, "additional_supplies": "Extra cups"},
        "beers": [
            {"beer_style": "Pilsner", "packaging": "Draft", "quantity": 2},
            {"beer_style": "IPA", "packaging": "Cans", "quantity": 5},
        ],
        "employee_ids": [],
    }
    body.update(overrides)
    return body


def test_create_and_fetch_event_with_children(session_local) -> None:
    client = _build_client(session_local)
    ann, bob = _seed_staff(session_local)

    response = client.post("/api/v1/events", json=_event_body(employee_ids=[ann, bob, ann]))
    assert response.status_code == 200
    payload = response.json()
    assert payload["date_display"] == "7/4/2024"
    assert payload["time_display"] == "1:05 PM"
    assert payload["supplies"]["ice"] is True
    assert payload["supplies"]["cups"] is False
    assert [b["beer_style"] for b in payload["beers"]] == ["Pilsner", "IPA"]
    assert sorted(s["name"] for s in payload["staff"]) == ["Ann", "Bob"]

    fetched = client.get(f"/api/v1/events/{payload['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["title"] == "Summer Fest"


def test_update_diffs_staff_and_replaces_beers(session_local) -> None:
    client = _build_client(session_local)
    ann, bob = _seed_staff(session_local)
    event_id = client.post("/api/v1/events", json=_event_body(employee_ids=[ann])).json()["id"]

    response = client.put(
        f"/api/v1/events/{event_id}",
        json={"employee_ids": [bob], "beers": [{"beer_style": "Stout", "packaging": "Bottles", "quantity": 1}]},
    )
    assert response.status_code == 200
    payload = response.json()
    assert [s["name"] for s in payload["staff"]] == ["Bob"]
    assert [b["beer_style"] for b in payload["beers"]] == ["Stout"]
    # untouched fields stay
    assert payload["title"] == "Summer Fest"

    with session_local() as db:
        assert db.query(EventAssignment).count() == 1
        assert db.query(EventBeer).count() == 1


def test_unknown_staff_member_is_404_and_nothing_is_written(session_local) -> None:
    client = _build_client(session_local)
    response = client.post("/api/v1/events", json=_event_body(employee_ids=[999]))
    assert response.status_code == 404
    assert client.get("/api/v1/events").json()["events"] == []


def test_invalid_time_is_400(session_local) -> None:
    client = _build_client(session_local)
    response = client.post("/api/v1/events", json=_event_body(time="1pm"))
    assert response.status_code == 400


def test_list_events_by_range(session_local) -> None:
    client = _build_client(session_local)
    client.post("/api/v1/events", json=_event_body(title="June", date="2024-06-15"))
    client.post("/api/v1/events", json=_event_body(title="July", date="2024-07-15"))

    response = client.get("/api/v1/events", params={"start": "2024-07-01", "end": "2024-07-31"})
    assert [e["title"] for e in response.json()["events"]] == ["July"]


def test_event_staff_show_in_week_and_vanish_after_delete(session_local) -> None:
    client = _build_client(session_local)
    ann, _ = _seed_staff(session_local)
    event_id = client.post("/api/v1/events", json=_event_body(employee_ids=[ann])).json()["id"]

    week = client.get("/api/v1/schedule/week", params={"start": "2024-07-04"}).json()
    assert week["week_start"] == "2024-07-01"
    entries = week["grid"]["Ann"]["THU"]
    assert [e["id"] for e in entries] == [f"event_{event_id}_{ann}"]
    assert entries[0]["css_class"] == "shift-event"
    assert entries[0]["shift"] == "13:05"

    # the schedule editor refuses synthesized entries
    assert client.delete(f"/api/v1/schedule/shifts/event_{event_id}_{ann}").status_code == 409

    assert client.delete(f"/api/v1/events/{event_id}").status_code == 200
    assert client.get(f"/api/v1/events/{event_id}").status_code == 404

    week = client.get("/api/v1/schedule/week", params={"start": "2024-07-01"}).json()
    assert week["shift_count"] == 0
    with session_local() as db:
        assert db.query(EventAssignment).count() == 0
        assert db.query(Shift).count() == 0
