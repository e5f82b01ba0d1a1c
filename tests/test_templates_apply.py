from __future__ import annotations

import json
from datetime import date

import pytest
from sqlalchemy import select

from taproom.db.models import Employee, ScheduleTemplate, Shift
from taproom.services import templates as svc
from taproom.services.errors import TemplateApplyError
from taproom.services.schedule import ShiftEntry, init_grid

WEEK = date(2024, 7, 1)


def _seed(db) -> tuple[Employee, Employee]:
    ann = Employee(name="Ann")
    bob = Employee(name="Bob")
    db.add_all([ann, bob])
    db.commit()
    return ann, bob


def test_template_to_shifts_skips_unknown_days_and_missing_employees() -> None:
    template = {
        "Monday": [{"employeeId": 1, "shift": "Tasting Room"}, {"employeeId": 42, "shift": "Offsite"}],
        "Funday": [{"employeeId": 1, "shift": "Tasting Room"}],
        "Sunday": [{"employeeId": 2, "shift": "Packaging"}, "garbage"],
    }
    rows = svc.template_to_shifts(template, WEEK, [{"id": 1, "name": "Ann"}, {"id": 2, "name": "Bob"}])

    assert [(r["employee_name"], r["day"], r["date"], r["event_type"]) for r in rows] == [
        ("Ann", "MON", date(2024, 7, 1), "tasting"),
        ("Bob", "SUN", date(2024, 7, 7), "packaging"),
    ]
    assert {r["shift"] for r in rows} == {"11-Close"}


def test_apply_replaces_the_whole_week(db) -> None:
    ann, bob = _seed(db)
    db.add_all(
        [
            Shift(employee_name="Ann", day="TUE", date=date(2024, 7, 2), shift="old"),
            Shift(employee_name="Someone", day="SAT", date=date(2024, 7, 6), shift="old"),
            Shift(employee_name="Ann", day="MON", date=date(2024, 7, 8), shift="next week"),
        ]
    )
    gone = Employee(name="Gone")
    db.add(gone)
    db.commit()
    gone_id = gone.id
    db.delete(gone)

    row = svc.create_template(
        db,
        name="Summer",
        payload={
            "Monday": [{"employeeId": ann.id, "shift": "Tasting Room"}],
            "Wednesday": [{"employeeId": bob.id, "shift": "Offsite"}, {"employeeId": gone_id, "shift": "Offsite"}],
        },
    )

    result = svc.apply_template(db, row, WEEK)
    assert result.deleted == 2
    assert result.inserted == 2

    week = db.execute(
        select(Shift).where(Shift.date >= date(2024, 7, 1)).where(Shift.date <= date(2024, 7, 7)).order_by(Shift.date)
    ).scalars().all()
    assert [(s.employee_name, s.day, s.shift) for s in week] == [("Ann", "MON", "11-Close"), ("Bob", "WED", "11-Close")]
    assert all(s.shift != "old" for s in week)
    # next week's rows are untouched
    assert db.query(Shift).filter(Shift.date == date(2024, 7, 8)).count() == 1


def test_apply_with_nothing_to_add_keeps_the_week(db) -> None:
    _seed(db)
    db.add(Shift(employee_name="Ann", day="TUE", date=date(2024, 7, 2), shift="keep"))
    db.commit()
    row = svc.create_template(db, name="Empty", payload=svc.empty_template())

    with pytest.raises(TemplateApplyError):
        svc.apply_template(db, row, WEEK)
    assert db.query(Shift).count() == 1


def test_malformed_template_json_degrades_to_empty() -> None:
    assert svc.parse_template_payload("{not json") == {}
    assert svc.parse_template_payload("[1, 2]") == {}
    assert svc.parse_template_payload(None) == {}
    assert svc.parse_template_payload('{"Monday": null}') == {"Monday": []}


def test_convert_schedule_skips_event_shifts() -> None:
    employees = [{"id": 1, "name": "Ann"}, {"id": 2, "name": "Bob"}]
    grid = init_grid(employees)
    grid["Ann"]["MON"].append(
        ShiftEntry(id=1, employee_name="Ann", day="MON", date="2024-07-01", shift="11-Close", event_type="offsite")
    )
    grid["Bob"]["FRI"].append(
        ShiftEntry(
            id="event_3_2", employee_name="Bob", day="FRI", date="2024-07-05", event_type="event",
            event_name="Fest", event_id=3,
        )
    )

    payload = svc.convert_schedule_to_template(grid, employees)
    assert payload["Monday"] == [{"employeeId": 1, "shift": "Offsite"}]
    assert payload["Friday"] == []
    assert set(payload) == set(svc.empty_template())

    assert svc.convert_schedule_to_template(init_grid([]), employees) == svc.empty_template()


def test_save_week_as_template_round_trips_through_storage(db) -> None:
    ann, _ = _seed(db)
    grid = init_grid([ann])
    grid["Ann"]["SAT"].append(
        ShiftEntry(id=1, employee_name="Ann", day="SAT", date="2024-07-06", shift="11-Close", event_type="tasting")
    )
    row = svc.save_week_as_template(db, grid, name="From week")
    stored = json.loads(db.get(ScheduleTemplate, row.id).template)
    assert stored["Saturday"] == [{"employeeId": ann.id, "shift": "Tasting Room"}]


def test_stored_entries_with_unknown_shift_types_are_not_applied(db) -> None:
    ann, bob = _seed(db)
    row = svc.create_template(
        db,
        name="Legacy",
        payload={"Tuesday": [{"employeeId": ann.id, "shift": "Brewing"}, {"employeeId": bob.id, "shift": "Offsite"}]},
    )
    svc.apply_template(db, row, WEEK)
    assert [(s.employee_name, s.event_type) for s in db.query(Shift).all()] == [("Bob", "offsite")]

    brew = {"Monday": [{"employeeId": ann.id, "shift": "Brewing"}]}
    only_unknown = svc.create_template(db, name="Brew day", payload=brew)
    with pytest.raises(TemplateApplyError):
        svc.apply_template(db, only_unknown, WEEK)
