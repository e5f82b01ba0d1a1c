from __future__ import annotations

from datetime import date

import pytest

from taproom.db.models import Employee, Shift
from taproom.services import events as events_svc
from taproom.services import schedule as svc
from taproom.services.errors import ProtectedShiftError
from taproom.utils.dates import DAY_CODES

WEEK = date(2024, 7, 1)


def _employees() -> list[dict]:
    return [{"id": 1, "name": "Matt L."}, {"id": 2, "name": "Sara"}, {"id": 3, "name": "Jo"}]


def test_grid_has_seven_buckets_per_employee_and_counts_matches() -> None:
    shifts = [
        {"id": 10, "employee_name": "Sara", "day": "MON", "date": "2024-07-01", "shift": "11-Close"},
        {"id": 11, "employee_name": "Sara", "day": "TUE", "date": "2024-07-02", "shift": "11-Close"},
        {"id": 12, "employee_name": "Nobody", "day": "WED", "date": "2024-07-03", "shift": "11-Close"},
    ]
    events = [
        {
            "id": 7,
            "title": "Beer Fest",
            "date": "2024-07-06",
            "time": None,
            "assignments": [{"employee_id": 1}, {"employee_id": 99}],
        }
    ]

    result = svc.assemble_week(_employees(), shifts, events, week_start=WEEK)

    assert set(result.grid) == {"Matt L.", "Sara", "Jo"}
    for days in result.grid.values():
        assert list(days) == list(DAY_CODES)
    # two matched rows + one matched assignment; unmatched ones are dropped
    assert result.shift_count == 3
    assert svc.unscheduled_employees(result, _employees()) == ["Jo"]

    event_entry = result.grid["Matt L."]["SAT"][0]
    assert event_entry.id == "event_7_1"
    assert event_entry.shift == "Event Time TBD"
    assert event_entry.is_event


def test_substring_fallback_matches_shortened_name() -> None:
    shifts = [{"id": 1, "employee_name": "Matt", "day": "THU", "date": "2024-07-04", "shift": "11-Close"}]
    result = svc.assemble_week(_employees(), shifts, week_start=WEEK)
    assert len(result.grid["Matt L."]["THU"]) == 1
    assert "Matt L." in result.scheduled


def test_employee_id_wins_over_name() -> None:
    shifts = [
        {"id": 1, "employee_id": 3, "employee_name": "Sara", "day": "FRI", "date": "2024-07-05", "shift": "x"}
    ]
    result = svc.assemble_week(_employees(), shifts, week_start=WEEK)
    assert len(result.grid["Jo"]["FRI"]) == 1
    assert result.grid["Sara"]["FRI"] == []


def test_match_employee_name_rules() -> None:
    names = ["Matt L.", "Sara"]
    assert svc.match_employee_name("Sara", names) == "Sara"
    assert svc.match_employee_name("Matt", names) == "Matt L."
    assert svc.match_employee_name("", names) is None
    assert svc.match_employee_name("Zed", names) is None


def test_deleted_event_leaves_no_assignments_or_synthesized_shifts(db) -> None:
    matt = Employee(name="Matt L.")
    db.add(matt)
    db.commit()

    event = events_svc.create_event(
        db, {"title": "Pint Night", "date": "2024-07-03", "time": "18:00", "employee_ids": [matt.id]}
    )
    result, _ = svc.load_week(db, WEEK)
    assert [e.event_id for e in result.grid["Matt L."]["WED"]] == [event.id]

    events_svc.delete_event(db, event.id)

    result, _ = svc.load_week(db, WEEK)
    assert result.shift_count == 0
    db.refresh(matt)
    assert matt.assignments == []


def test_event_shifts_are_protected(db) -> None:
    emp = Employee(name="Sara")
    db.add(emp)
    db.commit()
    with pytest.raises(ProtectedShiftError):
        svc.delete_shift(db, "event_4_1")
    with pytest.raises(ProtectedShiftError):
        svc.save_shift(db, {"employee_id": emp.id, "date": "2024-07-02"}, shift_id="event_4_1")


def test_save_shift_fills_name_and_day_from_employee(db) -> None:
    emp = Employee(name="Sara")
    db.add(emp)
    db.commit()

    row = svc.save_shift(db, {"employee_id": emp.id, "date": "2024-07-04", "shift": "11-Close"})
    assert row.employee_name == "Sara"
    assert row.day == "THU"

    assert svc.remove_employee_from_week(db, "Sara", WEEK) == 1
    assert db.query(Shift).count() == 0


def test_reconcile_links_name_only_rows(db) -> None:
    db.add_all([Employee(name="Matt L."), Employee(name="Sara")])
    db.add_all(
        [
            Shift(employee_name="Matt", day="MON", date=date(2024, 7, 1), shift="11-Close"),
            Shift(employee_name="Ghost", day="MON", date=date(2024, 7, 1), shift="11-Close"),
        ]
    )
    db.commit()

    dry = svc.reconcile_shift_employees(db, dry_run=True)
    assert dry.linked == 1
    assert db.query(Shift).filter(Shift.employee_id.isnot(None)).count() == 0

    report = svc.reconcile_shift_employees(db)
    assert report.linked == 1
    assert report.unmatched == ["Ghost"]
    linked = db.query(Shift).filter(Shift.employee_name == "Matt").one()
    assert linked.employee.name == "Matt L."
