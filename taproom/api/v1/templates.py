# ruff: noqa: B008
from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from taproom.api.deps import require_admin
from taproom.api.errors import service_errors
from taproom.config import get_settings
from taproom.db.models import ScheduleTemplate
from taproom.db.session import get_db
from taproom.security.csrf import require_csrf
from taproom.services import schedule as schedule_svc
from taproom.services import templates as svc
from taproom.utils.dates import get_monday, parse_yyyy_mm_dd

router = APIRouter(prefix="/api/v1/templates", tags=["templates"])


ShiftType = Literal["Tasting Room", "Offsite", "Packaging"]


class TemplateEntry(BaseModel):
    employeeId: int
    shift: ShiftType = svc.DEFAULT_TEMPLATE_SHIFT


class TemplateOut(BaseModel):
    id: int
    name: str
    date: str | None = None
    is_holiday: bool
    template: dict[str, list[Any]]


class TemplateListOut(BaseModel):
    templates: list[TemplateOut]


class TemplateIn(BaseModel):
    name: str = Field(min_length=1, max_length=128)
    date: str | None = Field(default=None, description="YYYY-MM-DD for holiday templates")
    template: dict[str, list[TemplateEntry]] = Field(default_factory=dict)


class TemplateUpdateIn(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=128)
    date: str | None = None
    template: dict[str, list[TemplateEntry]] | None = None


class ApplyIn(BaseModel):
    week_start: str = Field(..., description="YYYY-MM-DD")


class ApplyOut(BaseModel):
    ok: bool = True
    template: str
    week_start: str
    deleted: int
    inserted: int
    message: str


class FromWeekIn(BaseModel):
    week_start: str = Field(..., description="YYYY-MM-DD")
    name: str = Field(default="Schedule template", min_length=1, max_length=128)
    template_id: int | None = None


class OkOut(BaseModel):
    ok: bool = True


def _out(row: ScheduleTemplate, payload: dict[str, Any] | None = None) -> TemplateOut:
    if payload is None:
        payload = svc.parse_template_payload(row.template)
    return TemplateOut(
        id=row.id,
        name=row.name,
        date=row.date.isoformat() if row.date else None,
        is_holiday=row.date is not None,
        template=payload,
    )


def _parse_day(value: str):
    try:
        return parse_yyyy_mm_dd(value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


def _payload(template: dict[str, list[TemplateEntry]]) -> dict[str, list[dict[str, Any]]]:
    return {day: [e.model_dump() for e in entries] for day, entries in template.items()}


@router.get("", response_model=TemplateListOut)
def list_all(_admin=Depends(require_admin), db: Session = Depends(get_db)):
    with service_errors("Template"):
        rows = svc.list_templates(db)
    return TemplateListOut(templates=[_out(row, payload) for row, payload in rows])


@router.get("/{template_id}", response_model=TemplateOut)
def get_one(template_id: int, _admin=Depends(require_admin), db: Session = Depends(get_db)):
    with service_errors("Template"):
        return _out(svc.get_template(db, template_id))


@router.post("", response_model=TemplateOut)
def create(
    body: TemplateIn,
    _admin=Depends(require_admin),
    _: None = Depends(require_csrf),
    db: Session = Depends(get_db),
):
    holiday = _parse_day(body.date) if body.date else None
    with service_errors("Template"):
        row = svc.create_template(db, name=body.name, payload=_payload(body.template), holiday_date=holiday)
    return _out(row)


@router.put("/{template_id}", response_model=TemplateOut)
def update(
    template_id: int,
    body: TemplateUpdateIn,
    _admin=Depends(require_admin),
    _: None = Depends(require_csrf),
    db: Session = Depends(get_db),
):
    fields = body.model_fields_set
    holiday = _parse_day(body.date) if body.date else None
    with service_errors("Template"):
        row = svc.update_template(
            db,
            template_id,
            name=body.name,
            payload=_payload(body.template) if body.template is not None else None,
            holiday_date=holiday,
            clear_date="date" in fields and not body.date,
        )
    return _out(row)


@router.delete("/{template_id}", response_model=OkOut)
def delete(
    template_id: int,
    _admin=Depends(require_admin),
    _: None = Depends(require_csrf),
    db: Session = Depends(get_db),
):
    with service_errors("Template"):
        svc.delete_template(db, template_id)
    return OkOut()


@router.post("/{template_id}/apply", response_model=ApplyOut)
def apply(
    template_id: int,
    body: ApplyIn,
    _admin=Depends(require_admin),
    _: None = Depends(require_csrf),
    db: Session = Depends(get_db),
):
    """Replace every shift of the target week with the template's shifts.

    Destructive: existing rows in that week are removed whatever their origin.
    """
    week_start = get_monday(_parse_day(body.week_start))
    with service_errors("Template"):
        row = svc.get_template(db, template_id)
        result = svc.apply_template(db, row, week_start, shift_label=get_settings().default_shift_label)
    return ApplyOut(
        template=result.template_name,
        week_start=result.week_start.isoformat(),
        deleted=result.deleted,
        inserted=result.inserted,
        message=result.message,
    )


@router.post("/from-week", response_model=TemplateOut)
def from_week(
    body: FromWeekIn,
    _admin=Depends(require_admin),
    _: None = Depends(require_csrf),
    db: Session = Depends(get_db),
):
    """Save a week's ordinary shifts as a template (new, or over ``template_id``)."""
    week_start = get_monday(_parse_day(body.week_start))
    with service_errors("Template"):
        result, _employees = schedule_svc.load_week(db, week_start)
        row = svc.save_week_as_template(db, result.grid, name=body.name, template_id=body.template_id)
    return _out(row)
