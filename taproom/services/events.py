"""Events and their owned rows: supplies, beer line items, notes, staff.

Each public write runs in a single transaction. Updates diff the staff
assignment set and replace the beer list wholesale.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from taproom.db.models import (
    Employee,
    Event,
    EventAssignment,
    EventBeer,
    EventNotes,
    EventSupplies,
)
from taproom.pdf.sheet import BeerLine, EventSheet
from taproom.services.errors import NotFoundError
from taproom.utils.dates import as_date

log = logging.getLogger(__name__)

EVENT_FIELDS = (
    "title",
    "date",
    "time",
    "setup_time",
    "duration",
    "contact_name",
    "contact_phone",
    "expected_attendees",
    "event_type",
    "event_type_other",
    "event_instructions",
    "off_prem",
    "info",
)

SUPPLY_FLAGS = (
    "table_needed",
    "beer_buckets",
    "table_cloth",
    "tent_weights",
    "signage",
    "ice",
    "jockey_box",
    "cups",
)

NOTE_FIELDS = ("notes", "attendance_actual", "beers_sold")

_FULL_LOAD = (
    selectinload(Event.supplies),
    selectinload(Event.beers),
    selectinload(Event.notes),
    selectinload(Event.assignments).selectinload(EventAssignment.employee),
)


def _event_values(data: Mapping[str, Any]) -> dict[str, Any]:
    values = {k: data[k] for k in EVENT_FIELDS if k in data}
    if "date" in values:
        values["date"] = as_date(values["date"])
    return values


def _apply_supplies(event: Event, supplies: Mapping[str, Any] | None) -> None:
    if supplies is None:
        return
    row = event.supplies or EventSupplies()
    for flag in SUPPLY_FLAGS:
        setattr(row, flag, bool(supplies.get(flag, False)))
    row.additional_supplies = supplies.get("additional_supplies") or None
    event.supplies = row


def _apply_notes(event: Event, notes: Mapping[str, Any] | None) -> None:
    if notes is None:
        return
    row = event.notes or EventNotes()
    for key in NOTE_FIELDS:
        if key in notes:
            setattr(row, key, notes[key])
    event.notes = row


def _replace_beers(event: Event, beers: Iterable[Mapping[str, Any]] | None) -> None:
    if beers is None:
        return
    event.beers.clear()
    for position, beer in enumerate(beers):
        event.beers.append(
            EventBeer(
                position=position,
                beer_style=(beer.get("beer_style") or "").strip(),
                packaging=beer.get("packaging") or "Draft",
                quantity=int(beer.get("quantity") or 1),
            )
        )


def _sync_assignments(db: Session, event: Event, employee_ids: Iterable[int] | None) -> None:
    if employee_ids is None:
        return

    wanted: list[int] = []
    for emp_id in employee_ids:
        if emp_id not in wanted:
            wanted.append(emp_id)

    if wanted:
        known = set(db.execute(select(Employee.id).where(Employee.id.in_(wanted))).scalars().all())
        missing = [i for i in wanted if i not in known]
        if missing:
            raise NotFoundError("Employee", missing[0])

    current = {a.employee_id: a for a in event.assignments}
    for emp_id, assignment in current.items():
        if emp_id not in wanted:
            event.assignments.remove(assignment)
    for emp_id in wanted:
        if emp_id not in current:
            event.assignments.append(EventAssignment(employee_id=emp_id))


def get_event(db: Session, event_id: int) -> Event:
    event = db.execute(select(Event).options(*_FULL_LOAD).where(Event.id == event_id)).scalar_one_or_none()
    if event is None:
        raise NotFoundError("Event", event_id)
    return event


def list_events(db: Session, start: date | None = None, end: date | None = None) -> list[Event]:
    q = select(Event).options(*_FULL_LOAD).order_by(Event.date.asc(), Event.id.asc())
    if start is not None:
        q = q.where(Event.date >= start)
    if end is not None:
        q = q.where(Event.date <= end)
    return list(db.execute(q).scalars().all())


def events_with_assignments(db: Session, start: date, end: date) -> list[Event]:
    """Events dated inside [start, end] with staff, supplies, beers and notes loaded."""
    return list_events(db, start, end)


def create_event(db: Session, data: Mapping[str, Any]) -> Event:
    event = Event(**_event_values(data))
    try:
        db.add(event)
        _apply_supplies(event, data.get("supplies") or {})
        _replace_beers(event, data.get("beers") or [])
        _apply_notes(event, data.get("notes"))
        _sync_assignments(db, event, data.get("employee_ids") or [])
        db.commit()
    except (SQLAlchemyError, NotFoundError):
        db.rollback()
        raise
    log.info("Created event %s (%s)", event.id, event.title)
    return get_event(db, event.id)


def update_event(db: Session, event_id: int, data: Mapping[str, Any]) -> Event:
    event = get_event(db, event_id)
    try:
        for k, v in _event_values(data).items():
            setattr(event, k, v)
        _apply_supplies(event, data.get("supplies"))
        _replace_beers(event, data.get("beers"))
        _apply_notes(event, data.get("notes"))
        _sync_assignments(db, event, data.get("employee_ids"))
        db.commit()
    except (SQLAlchemyError, NotFoundError):
        db.rollback()
        raise
    return get_event(db, event_id)


def delete_event(db: Session, event_id: int) -> None:
    """Delete an event together with its supplies, beers, notes and staff."""
    event = get_event(db, event_id)
    db.delete(event)
    db.commit()
    log.info("Deleted event %s", event_id)


def staff_names(event: Event) -> list[str]:
    return [a.employee.name for a in event.assignments if a.employee is not None]


def sheet_for_event(event: Event) -> EventSheet:
    supplies = event.supplies
    return EventSheet(
        title=event.title,
        date=event.date.isoformat(),
        time=event.time,
        setup_time=event.setup_time,
        duration=event.duration,
        contact_name=event.contact_name,
        contact_phone=event.contact_phone,
        expected_attendees=event.expected_attendees,
        event_type=event.event_type,
        event_type_other=event.event_type_other,
        event_instructions=event.event_instructions,
        info=event.info,
        off_prem=event.off_prem,
        supplies={flag: bool(getattr(supplies, flag)) for flag in SUPPLY_FLAGS} if supplies else {},
        additional_supplies=supplies.additional_supplies if supplies else None,
        beers=[BeerLine(b.beer_style, b.packaging, b.quantity) for b in event.beers],
        staff=staff_names(event),
    )


def resolve_for_pdf(db: Session, event_id: int) -> EventSheet:
    return sheet_for_event(get_event(db, event_id))
