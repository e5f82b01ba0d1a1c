"""Weekly schedule assembly and the schedule editor's write operations.

The grid merges two sources for one Monday-start week:

* persisted rows of ``schedules`` (ordinary shifts), and
* event staff assignments, synthesized into read-only shift entries.

Every function takes the SQLAlchemy ``Session`` it works with; nothing here
reaches for a shared client.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.orm import Session, selectinload

from taproom.db.models import Employee, Event, Shift, ShiftTag
from taproom.services.errors import NotFoundError, ProtectedShiftError
from taproom.utils.dates import DAY_CODES, as_date, sunday_first_day_code, week_range

log = logging.getLogger(__name__)

EVENT_SHIFT_PREFIX = "event_"

Grid = dict[str, dict[str, list["ShiftEntry"]]]


@dataclass
class ShiftEntry:
    id: int | str
    employee_name: str
    day: str
    date: str
    shift: str | None = None
    event_type: str | None = None
    event_name: str | None = None
    event_id: int | None = None
    event_info: str | None = None
    employee_id: int | None = None

    @property
    def is_event(self) -> bool:
        return self.event_id is not None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class WeekSchedule:
    week_start: date | None
    grid: Grid
    scheduled: set[str] = field(default_factory=set)

    @property
    def shift_count(self) -> int:
        return sum(len(bucket) for days in self.grid.values() for bucket in days.values())


def _get(obj: Any, key: str, default: Any = None) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(key, default)
    return getattr(obj, key, default)


def init_grid(employees: Iterable[Any]) -> Grid:
    return {_get(emp, "name"): {day: [] for day in DAY_CODES} for emp in employees}


def match_employee_name(stored_name: str | None, names: Sequence[str]) -> str | None:
    """Find the roster name a stored ``employee_name`` refers to.

    Exact equality wins; otherwise the first name where either string
    contains the other ("Matt" matches "Matt L."). Empty names never match.
    """
    if not stored_name:
        return None
    if stored_name in names:
        return stored_name
    for name in names:
        if name and (stored_name in name or name in stored_name):
            return name
    return None


def _bucket_day(row: Any) -> str:
    day = _get(row, "day")
    if day in DAY_CODES:
        return day
    return DAY_CODES[as_date(_get(row, "date")).weekday()]


def _date_str(value: Any) -> str:
    return value.isoformat() if isinstance(value, date) else str(value)


def process_shifts(
    shifts: Iterable[Any],
    grid: Grid,
    scheduled: set[str],
    names_by_id: Mapping[int, str] | None = None,
) -> None:
    names = list(grid.keys())
    names_by_id = names_by_id or {}

    for row in shifts:
        emp_id = _get(row, "employee_id")
        target = names_by_id.get(emp_id) if emp_id is not None else None
        if target is None:
            target = match_employee_name(_get(row, "employee_name"), names)
        if target is None:
            log.debug("Dropping shift %s: no employee matches %r", _get(row, "id"), _get(row, "employee_name"))
            continue

        day = _bucket_day(row)
        grid[target][day].append(
            ShiftEntry(
                id=_get(row, "id"),
                employee_name=_get(row, "employee_name") or target,
                day=day,
                date=_date_str(_get(row, "date")),
                shift=_get(row, "shift"),
                event_type=_get(row, "event_type"),
                event_name=_get(row, "event_name"),
                event_id=_get(row, "event_id"),
                employee_id=emp_id,
            )
        )
        scheduled.add(target)


def process_events(
    events: Iterable[Any],
    employees: Iterable[Any],
    grid: Grid,
    scheduled: set[str],
) -> None:
    names_by_id = {_get(emp, "id"): _get(emp, "name") for emp in employees}

    for event in events:
        assignments = _get(event, "assignments") or []
        if not assignments:
            continue

        day = sunday_first_day_code(_get(event, "date"))
        event_id = _get(event, "id")
        for assignment in assignments:
            emp_id = _get(assignment, "employee_id")
            name = names_by_id.get(emp_id)
            if name is None or name not in grid:
                continue

            grid[name][day].append(
                ShiftEntry(
                    id=f"{EVENT_SHIFT_PREFIX}{event_id}_{emp_id}",
                    employee_name=name,
                    day=day,
                    date=_date_str(_get(event, "date")),
                    shift=_get(event, "time") or "Event Time TBD",
                    event_type=ShiftTag.EVENT.value,
                    event_name=_get(event, "title"),
                    event_id=event_id,
                    event_info=_get(event, "info"),
                    employee_id=emp_id,
                )
            )
            scheduled.add(name)


def assemble_week(
    employees: Sequence[Any],
    shifts: Iterable[Any],
    events: Iterable[Any] = (),
    *,
    week_start: date | None = None,
) -> WeekSchedule:
    """Build the per-employee, per-day grid for one week.

    Inputs are expected to be filtered to the week already.
    """
    grid = init_grid(employees)
    scheduled: set[str] = set()
    names_by_id = {_get(emp, "id"): _get(emp, "name") for emp in employees}

    process_shifts(shifts, grid, scheduled, names_by_id)
    process_events(events, employees, grid, scheduled)
    return WeekSchedule(week_start=week_start, grid=grid, scheduled=scheduled)


def unscheduled_employees(result: WeekSchedule, employees: Iterable[Any]) -> list[str]:
    return [_get(emp, "name") for emp in employees if _get(emp, "name") not in result.scheduled]


def list_employees(db: Session) -> list[Employee]:
    return list(db.execute(select(Employee).order_by(Employee.name.asc())).scalars().all())


def fetch_week_shifts(db: Session, week_start: date) -> list[Shift]:
    start, end = week_range(week_start)
    return list(
        db.execute(
            select(Shift).where(Shift.date >= start).where(Shift.date <= end).order_by(Shift.date.asc(), Shift.id.asc())
        ).scalars().all()
    )


def fetch_week_events(db: Session, week_start: date) -> list[Event]:
    start, end = week_range(week_start)
    return list(
        db.execute(
            select(Event)
            .options(selectinload(Event.assignments))
            .where(Event.date >= start)
            .where(Event.date <= end)
            .order_by(Event.date.asc())
        ).scalars().all()
    )


def load_week(db: Session, week_start: date) -> tuple[WeekSchedule, list[Employee]]:
    employees = list_employees(db)
    result = assemble_week(
        employees,
        fetch_week_shifts(db, week_start),
        fetch_week_events(db, week_start),
        week_start=week_start,
    )
    return result, employees


# --- schedule editor writes ---------------------------------------------------

_EDITABLE = ("employee_id", "employee_name", "day", "date", "shift", "event_type")


def _is_event_ident(shift_id: int | str) -> bool:
    return str(shift_id).startswith(EVENT_SHIFT_PREFIX)


def save_shift(db: Session, data: Mapping[str, Any], shift_id: int | str | None = None) -> Shift:
    """Create a shift, or update ``shift_id``.

    Event-derived rows are refused in both directions.
    """
    if data.get("event_id") or (shift_id is not None and _is_event_ident(shift_id)):
        raise ProtectedShiftError()

    values = {k: data[k] for k in _EDITABLE if k in data}
    if "date" in values:
        values["date"] = as_date(values["date"])
        values.setdefault("day", DAY_CODES[values["date"].weekday()])

    if values.get("employee_id") is not None and not values.get("employee_name"):
        emp = db.get(Employee, values["employee_id"])
        if emp is None:
            raise NotFoundError("Employee", values["employee_id"])
        values["employee_name"] = emp.name

    if shift_id is None:
        row = Shift(**values)
        db.add(row)
    else:
        row = db.get(Shift, int(shift_id))
        if row is None:
            raise NotFoundError("Shift", shift_id)
        if row.event_id is not None:
            raise ProtectedShiftError()
        for k, v in values.items():
            setattr(row, k, v)

    db.commit()
    db.refresh(row)
    return row


def delete_shift(db: Session, shift_id: int | str) -> None:
    if _is_event_ident(shift_id):
        raise ProtectedShiftError("Event shifts can only be modified in the Events page")

    row = db.get(Shift, int(shift_id))
    if row is None:
        raise NotFoundError("Shift", shift_id)
    if row.event_id is not None:
        raise ProtectedShiftError("Event shifts can only be modified in the Events page")

    db.delete(row)
    db.commit()


def remove_employee_from_week(db: Session, employee_name: str, week_start: date) -> int:
    """Delete an employee's ordinary shifts for one week; returns the count."""
    start, end = week_range(week_start)
    res = db.execute(
        delete(Shift)
        .where(Shift.employee_name == employee_name)
        .where(Shift.event_id.is_(None))
        .where(Shift.date >= start)
        .where(Shift.date <= end)
    )
    db.commit()
    return res.rowcount or 0


@dataclass
class ReconcileReport:
    linked: int = 0
    unmatched: list[str] = field(default_factory=list)


def reconcile_shift_employees(db: Session, *, dry_run: bool = False) -> ReconcileReport:
    """Backfill ``schedules.employee_id`` from ``employee_name``.

    One-time migration step for rows written before the foreign key existed;
    uses the same exact-then-substring policy as the grid.
    """
    employees = list_employees(db)
    names = [e.name for e in employees]
    id_by_name = {e.name: e.id for e in employees}

    report = ReconcileReport()
    rows = db.execute(select(Shift).where(Shift.employee_id.is_(None))).scalars().all()
    for row in rows:
        name = match_employee_name(row.employee_name, names)
        if name is None:
            if row.employee_name not in report.unmatched:
                report.unmatched.append(row.employee_name)
            continue
        row.employee_id = id_by_name[name]
        report.linked += 1

    if dry_run:
        db.rollback()
    else:
        db.commit()
    log.info("Shift reconciliation: linked=%s unmatched=%s dry_run=%s", report.linked, len(report.unmatched), dry_run)
    return report
