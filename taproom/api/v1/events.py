# ruff: noqa: B008
from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from taproom.api.deps import require_admin, require_user
from taproom.api.errors import service_errors
from taproom.db.models import Event
from taproom.db.session import get_db
from taproom.security.csrf import require_csrf
from taproom.services import events as svc
from taproom.utils.dates import format_date_display, format_time_12h, parse_hhmm_or_none, parse_yyyy_mm_dd

router = APIRouter(prefix="/api/v1/events", tags=["events"])

EventTypeLiteral = Literal["tasting", "pint_night", "beer_fest", "other"]
PackagingLiteral = Literal["Draft", "Bottles", "Cans"]


class SuppliesIn(BaseModel):
    table_needed: bool = False
    beer_buckets: bool = False
    table_cloth: bool = False
    tent_weights: bool = False
    signage: bool = False
    ice: bool = False
    jockey_box: bool = False
    cups: bool = False
    additional_supplies: str | None = Field(default=None, max_length=2000)


class BeerIn(BaseModel):
    beer_style: str = Field(min_length=1, max_length=128)
    packaging: PackagingLiteral = "Draft"
    quantity: int = Field(default=1, ge=1, le=10000)


class NotesIn(BaseModel):
    notes: str | None = None
    attendance_actual: int | None = Field(default=None, ge=0)
    beers_sold: str | None = None


class EventIn(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    date: str = Field(..., description="YYYY-MM-DD")
    time: str | None = Field(default=None, description="HH:MM")
    setup_time: str | None = Field(default=None, description="HH:MM")
    duration: str | None = Field(default=None, max_length=64)
    contact_name: str | None = Field(default=None, max_length=128)
    contact_phone: str | None = Field(default=None, max_length=40)
    expected_attendees: int | None = Field(default=None, ge=0)
    event_type: EventTypeLiteral = "tasting"
    event_type_other: str | None = Field(default=None, max_length=128)
    event_instructions: str | None = None
    off_prem: bool = False
    info: str | None = None
    supplies: SuppliesIn = Field(default_factory=SuppliesIn)
    beers: list[BeerIn] = Field(default_factory=list)
    notes: NotesIn | None = None
    employee_ids: list[int] = Field(default_factory=list)


class EventUpdateIn(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    date: str | None = None
    time: str | None = None
    setup_time: str | None = None
    duration: str | None = Field(default=None, max_length=64)
    contact_name: str | None = Field(default=None, max_length=128)
    contact_phone: str | None = Field(default=None, max_length=40)
    expected_attendees: int | None = Field(default=None, ge=0)
    event_type: EventTypeLiteral | None = None
    event_type_other: str | None = Field(default=None, max_length=128)
    event_instructions: str | None = None
    off_prem: bool | None = None
    info: str | None = None
    supplies: SuppliesIn | None = None
    beers: list[BeerIn] | None = None
    notes: NotesIn | None = None
    employee_ids: list[int] | None = None


class StaffOut(BaseModel):
    id: int
    name: str


class EventOut(BaseModel):
    id: int
    title: str
    date: str
    date_display: str
    time: str | None = None
    time_display: str
    setup_time: str | None = None
    duration: str | None = None
    contact_name: str | None = None
    contact_phone: str | None = None
    expected_attendees: int | None = None
    event_type: str
    event_type_other: str | None = None
    event_instructions: str | None = None
    off_prem: bool
    info: str | None = None
    supplies: dict[str, Any] | None = None
    beers: list[dict[str, Any]]
    notes: dict[str, Any] | None = None
    staff: list[StaffOut]


class EventListOut(BaseModel):
    events: list[EventOut]


class OkOut(BaseModel):
    ok: bool = True


def event_out(event: Event) -> EventOut:
    supplies = None
    if event.supplies is not None:
        supplies = {flag: getattr(event.supplies, flag) for flag in svc.SUPPLY_FLAGS}
        supplies["additional_supplies"] = event.supplies.additional_supplies
    notes = None
    if event.notes is not None:
        notes = {key: getattr(event.notes, key) for key in svc.NOTE_FIELDS}
    return EventOut(
        id=event.id,
        title=event.title,
        date=event.date.isoformat(),
        date_display=format_date_display(event.date),
        time=event.time,
        time_display=format_time_12h(event.time),
        setup_time=event.setup_time,
        duration=event.duration,
        contact_name=event.contact_name,
        contact_phone=event.contact_phone,
        expected_attendees=event.expected_attendees,
        event_type=event.event_type,
        event_type_other=event.event_type_other,
        event_instructions=event.event_instructions,
        off_prem=event.off_prem,
        info=event.info,
        supplies=supplies,
        beers=[
            {"beer_style": b.beer_style, "packaging": b.packaging, "quantity": b.quantity} for b in event.beers
        ],
        notes=notes,
        staff=[StaffOut(id=a.employee_id, name=a.employee.name) for a in event.assignments if a.employee],
    )


def _parse_day(value: str):
    try:
        return parse_yyyy_mm_dd(value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


def _service_data(body: BaseModel, *, partial: bool) -> dict[str, Any]:
    data = body.model_dump(exclude_unset=partial)
    if data.get("date"):
        data["date"] = _parse_day(data["date"])
    elif "date" in data:
        raise HTTPException(status_code=400, detail="Event date is required")
    try:
        for key in ("time", "setup_time"):
            if key in data:
                data[key] = parse_hhmm_or_none(data[key])
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return data


@router.get("", response_model=EventListOut)
def list_all(
    start: str | None = Query(default=None, description="YYYY-MM-DD"),
    end: str | None = Query(default=None, description="YYYY-MM-DD"),
    _user=Depends(require_user),
    db: Session = Depends(get_db),
):
    start_d = _parse_day(start) if start else None
    end_d = _parse_day(end) if end else None
    with service_errors("Event"):
        rows = svc.list_events(db, start_d, end_d)
    return EventListOut(events=[event_out(e) for e in rows])


@router.get("/{event_id}", response_model=EventOut)
def get_one(event_id: int, _user=Depends(require_user), db: Session = Depends(get_db)):
    with service_errors("Event"):
        return event_out(svc.get_event(db, event_id))


@router.post("", response_model=EventOut)
def create(
    body: EventIn,
    _admin=Depends(require_admin),
    _: None = Depends(require_csrf),
    db: Session = Depends(get_db),
):
    data = _service_data(body, partial=False)
    with service_errors("Event"):
        return event_out(svc.create_event(db, data))


@router.put("/{event_id}", response_model=EventOut)
def update(
    event_id: int,
    body: EventUpdateIn,
    _admin=Depends(require_admin),
    _: None = Depends(require_csrf),
    db: Session = Depends(get_db),
):
    data = _service_data(body, partial=True)
    with service_errors("Event"):
        return event_out(svc.update_event(db, event_id, data))


@router.delete("/{event_id}", response_model=OkOut)
def delete(
    event_id: int,
    _admin=Depends(require_admin),
    _: None = Depends(require_csrf),
    db: Session = Depends(get_db),
):
    with service_errors("Event"):
        svc.delete_event(db, event_id)
    return OkOut()
