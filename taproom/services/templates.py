"""Weekly schedule templates (the ``holidays`` table).

A template maps full day names to the people working that day::

    {"Monday": [{"employeeId": 3, "shift": "Tasting Room"}], "Tuesday": []}

Applying one replaces a whole week of shifts.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from taproom.db.models import ScheduleTemplate, Shift
from taproom.services.errors import NotFoundError, TemplateApplyError, TemplateStorageError
from taproom.services.schedule import Grid, list_employees
from taproom.services.shift_format import is_event_shift, shift_type_tag
from taproom.utils.dates import DAY_NAMES, day_name_for_code, week_range

log = logging.getLogger(__name__)

TemplatePayload = dict[str, list[dict[str, Any]]]

DEFAULT_TEMPLATE_SHIFT = "Tasting Room"


@dataclass(frozen=True)
class ApplyResult:
    template_name: str
    week_start: date
    deleted: int
    inserted: int

    @property
    def message(self) -> str:
        return (
            f'Applied template "{self.template_name}": replaced {self.deleted} '
            f"existing shift(s) with {self.inserted}"
        )


def _get(obj: Any, key: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(key)
    return getattr(obj, key, None)


def empty_template() -> TemplatePayload:
    return {name: [] for name in DAY_NAMES}


def parse_template_payload(raw: Any) -> TemplatePayload:
    """Decode stored template JSON; bad data degrades to an empty mapping."""
    if raw is None or raw == "":
        return {}
    if isinstance(raw, Mapping):
        data: Any = raw
    else:
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            log.warning("Malformed template JSON, using empty template: %s", e)
            return {}
    if not isinstance(data, Mapping):
        log.warning("Template JSON is %s, expected an object; using empty template", type(data).__name__)
        return {}
    return {str(day): list(entries or []) for day, entries in data.items()}


def template_to_shifts(
    template: Mapping[str, Iterable[Mapping[str, Any]]],
    week_start: date,
    employees: Iterable[Any],
    *,
    shift_label: str = "11-Close",
) -> list[dict[str, Any]]:
    """Expand a template into concrete shift rows for the week at ``week_start``.

    Unknown day names are skipped, as are entries whose employee no longer
    exists in ``employees`` and entries whose shift type is not one of
    ``SHIFT_TYPES``.
    """
    roster = {_get(e, "id"): e for e in employees}
    rows: list[dict[str, Any]] = []

    for day_name, entries in template.items():
        if day_name not in DAY_NAMES:
            continue
        offset = DAY_NAMES.index(day_name)
        day_date = week_start + timedelta(days=offset)
        day_code = day_name[:3].upper()

        for entry in entries:
            if not isinstance(entry, Mapping):
                continue
            emp = roster.get(entry.get("employeeId"))
            if emp is None:
                continue
            try:
                tag = shift_type_tag(entry.get("shift"))
            except ValueError:
                log.warning("Skipping %s entry with unknown shift type %r", day_name, entry.get("shift"))
                continue
            name = _get(emp, "name")
            rows.append(
                {
                    "employee_id": entry.get("employeeId"),
                    "employee_name": name,
                    "day": day_code,
                    "date": day_date,
                    "shift": shift_label,
                    "event_type": tag,
                    "event_name": None,
                }
            )
    return rows


def convert_schedule_to_template(grid: Grid, employees: Iterable[Any]) -> TemplatePayload:
    """Turn a week grid back into a template; event shifts are left out."""
    ids_by_name = {_get(e, "name"): _get(e, "id") for e in employees}
    payload: TemplatePayload = {}

    for employee_name, days in grid.items():
        emp_id = ids_by_name.get(employee_name)
        if emp_id is None:
            continue
        for day_code, shifts in days.items():
            day_name = day_name_for_code(day_code)
            if day_name not in DAY_NAMES:
                continue
            bucket = payload.setdefault(day_name, [])
            for shift in shifts:
                if is_event_shift(shift):
                    continue
                bucket.append({"employeeId": emp_id, "shift": _shift_type_for(shift)})

    if not payload:
        return empty_template()
    return payload


def _shift_type_for(shift: Any) -> str:
    tag = _get(shift, "event_type")
    for shift_type, known_tag in (("Offsite", "offsite"), ("Packaging", "packaging")):
        if tag == known_tag:
            return shift_type
    return DEFAULT_TEMPLATE_SHIFT


# --- persistence ------------------------------------------------------------------


def list_templates(db: Session) -> list[tuple[ScheduleTemplate, TemplatePayload]]:
    rows = db.execute(select(ScheduleTemplate).order_by(ScheduleTemplate.name.asc())).scalars().all()
    return [(row, parse_template_payload(row.template)) for row in rows]


def get_template(db: Session, template_id: int) -> ScheduleTemplate:
    row = db.get(ScheduleTemplate, template_id)
    if row is None:
        raise NotFoundError("Template", template_id)
    return row


def create_template(
    db: Session, *, name: str, payload: Mapping[str, Any], holiday_date: date | None = None
) -> ScheduleTemplate:
    row = ScheduleTemplate(name=name.strip(), date=holiday_date, template=json.dumps(dict(payload)))
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def update_template(
    db: Session,
    template_id: int,
    *,
    name: str | None = None,
    payload: Mapping[str, Any] | None = None,
    holiday_date: date | None = None,
    clear_date: bool = False,
) -> ScheduleTemplate:
    row = get_template(db, template_id)
    if name is not None:
        row.name = name.strip()
    if payload is not None:
        row.template = json.dumps(dict(payload))
    if clear_date:
        row.date = None
    elif holiday_date is not None:
        row.date = holiday_date
    db.commit()
    db.refresh(row)
    return row


def delete_template(db: Session, template_id: int) -> None:
    row = get_template(db, template_id)
    db.delete(row)
    db.commit()


def save_week_as_template(db: Session, grid: Grid, *, name: str, template_id: int | None = None) -> ScheduleTemplate:
    payload = convert_schedule_to_template(grid, list_employees(db))
    if template_id is not None:
        return update_template(db, template_id, payload=payload)
    return create_template(db, name=name, payload=payload)


def apply_template(
    db: Session,
    template: ScheduleTemplate,
    week_start: date,
    *,
    shift_label: str = "11-Close",
) -> ApplyResult:
    """Replace every shift in the target week with the template's shifts.

    Destructive: all rows dated inside the week are removed regardless of
    where they came from. Delete and insert commit together; on failure the
    week is rolled back to its previous contents.

    A template that expands to no shifts raises ``TemplateApplyError``
    ("No shifts to add") before the delete runs, so the week keeps its
    existing rows in that case.
    """
    employees = list_employees(db)
    rows = template_to_shifts(
        parse_template_payload(template.template), week_start, employees, shift_label=shift_label
    )
    if not rows:
        raise TemplateApplyError("No shifts to add from this template")

    start, end = week_range(week_start)
    try:
        res = db.execute(delete(Shift).where(Shift.date >= start).where(Shift.date <= end))
        deleted = res.rowcount or 0
        db.add_all([Shift(**row) for row in rows])
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        log.exception("Applying template %s to week %s failed", template.id, week_start)
        raise TemplateStorageError("Template could not be applied; the week was left unchanged") from e

    log.info("Template %s applied to week %s: deleted=%s inserted=%s", template.id, week_start, deleted, len(rows))
    return ApplyResult(template_name=template.name, week_start=week_start, deleted=deleted, inserted=len(rows))
