# ruff: noqa: B008
from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from taproom.api.deps import require_admin, require_user
from taproom.api.errors import service_errors
from taproom.db.models import Shift
from taproom.db.session import get_db
from taproom.security.csrf import require_csrf
from taproom.services import schedule as svc
from taproom.services.shift_format import format_shift_display, shift_class
from taproom.utils.dates import DAY_CODES, current_week_start, get_monday, parse_yyyy_mm_dd, week_range

router = APIRouter(prefix="/api/v1/schedule", tags=["schedule"])


class ShiftIn(BaseModel):
    employee_id: int | None = None
    employee_name: str | None = Field(default=None, max_length=128)
    date: str = Field(..., description="YYYY-MM-DD")
    shift: str | None = Field(default=None, max_length=64)
    event_type: Literal["tasting", "offsite", "packaging"] | None = None


class ShiftOut(BaseModel):
    id: int
    employee_id: int | None = None
    employee_name: str
    day: str
    date: str
    shift: str | None = None
    event_type: str | None = None


class WeekOut(BaseModel):
    week_start: str
    week_end: str
    days: list[str]
    grid: dict[str, dict[str, list[dict[str, Any]]]]
    scheduled: list[str]
    unscheduled: list[str]
    shift_count: int


class RemoveFromWeekIn(BaseModel):
    employee_name: str = Field(min_length=1, max_length=128)
    week_start: str = Field(..., description="YYYY-MM-DD")


class CountOut(BaseModel):
    ok: bool = True
    count: int = 0


class ReconcileOut(BaseModel):
    linked: int
    unmatched: list[str]
    dry_run: bool


class OkOut(BaseModel):
    ok: bool = True


def _parse_day(value: str) -> Any:
    try:
        return parse_yyyy_mm_dd(value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


def _shift_out(row: Shift) -> ShiftOut:
    return ShiftOut(
        id=row.id,
        employee_id=row.employee_id,
        employee_name=row.employee_name,
        day=row.day,
        date=row.date.isoformat(),
        shift=row.shift,
        event_type=row.event_type,
    )


def _entry_json(entry: svc.ShiftEntry) -> dict[str, Any]:
    out = entry.to_dict()
    display = format_shift_display(entry)
    out["title"] = display.title
    out["subtitle"] = display.subtitle
    out["css_class"] = shift_class(entry.event_type)
    out["is_event"] = entry.is_event
    return out


@router.get("/week", response_model=WeekOut)
def get_week(
    start: str | None = Query(default=None, description="YYYY-MM-DD; any day of the week"),
    _user=Depends(require_user),
    db: Session = Depends(get_db),
):
    week_start = get_monday(_parse_day(start)) if start else current_week_start()
    with service_errors("Schedule"):
        result, employees = svc.load_week(db, week_start)

    _, week_end = week_range(week_start)
    return WeekOut(
        week_start=week_start.isoformat(),
        week_end=week_end.isoformat(),
        days=list(DAY_CODES),
        grid={
            name: {day: [_entry_json(e) for e in entries] for day, entries in days.items()}
            for name, days in result.grid.items()
        },
        scheduled=sorted(result.scheduled),
        unscheduled=svc.unscheduled_employees(result, employees),
        shift_count=result.shift_count,
    )


@router.post("/shifts", response_model=ShiftOut)
def create_shift(
    body: ShiftIn,
    _admin=Depends(require_admin),
    _: None = Depends(require_csrf),
    db: Session = Depends(get_db),
):
    if body.employee_id is None and not body.employee_name:
        raise HTTPException(status_code=400, detail="employee_id or employee_name is required")
    data = body.model_dump()
    data["date"] = _parse_day(body.date)
    with service_errors("Schedule"):
        return _shift_out(svc.save_shift(db, data))


@router.put("/shifts/{shift_id}", response_model=ShiftOut)
def update_shift(
    shift_id: str,
    body: ShiftIn,
    _admin=Depends(require_admin),
    _: None = Depends(require_csrf),
    db: Session = Depends(get_db),
):
    data = body.model_dump(exclude_unset=True)
    data["date"] = _parse_day(body.date)
    with service_errors("Schedule"):
        return _shift_out(svc.save_shift(db, data, shift_id=_shift_ident(shift_id)))


@router.delete("/shifts/{shift_id}", response_model=OkOut)
def delete_shift(
    shift_id: str,
    _admin=Depends(require_admin),
    _: None = Depends(require_csrf),
    db: Session = Depends(get_db),
):
    with service_errors("Schedule"):
        svc.delete_shift(db, _shift_ident(shift_id))
    return OkOut()


def _shift_ident(raw: str) -> int | str:
    """Shift ids are integers; synthesized event entries use ``event_<id>_<emp>``."""
    if raw.startswith(svc.EVENT_SHIFT_PREFIX):
        return raw
    try:
        return int(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid shift id") from None


@router.delete("/week/employee", response_model=CountOut)
def remove_employee_from_week(
    body: RemoveFromWeekIn,
    _admin=Depends(require_admin),
    _: None = Depends(require_csrf),
    db: Session = Depends(get_db),
):
    week_start = get_monday(_parse_day(body.week_start))
    with service_errors("Schedule"):
        count = svc.remove_employee_from_week(db, body.employee_name, week_start)
    return CountOut(count=count)


@router.post("/reconcile", response_model=ReconcileOut)
def reconcile(
    dry_run: bool = Query(default=True),
    _admin=Depends(require_admin),
    _: None = Depends(require_csrf),
    db: Session = Depends(get_db),
):
    """Link legacy name-only shift rows to employee ids."""
    with service_errors("Schedule"):
        report = svc.reconcile_shift_employees(db, dry_run=dry_run)
    return ReconcileOut(linked=report.linked, unmatched=report.unmatched, dry_run=dry_run)
