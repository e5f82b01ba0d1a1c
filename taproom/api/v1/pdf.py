# ruff: noqa: B008
import logging
from typing import Any, Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from taproom.api.deps import require_admin, require_user
from taproom.api.errors import service_errors
from taproom.config import get_settings
from taproom.db.session import get_db
from taproom.pdf.analyze import analyze_template
from taproom.pdf.field_map import get_field_map
from taproom.pdf.render import PdfRenderError, load_template, render_event_pdf
from taproom.pdf.sheet import EventSheet
from taproom.security.rate_limit import limit_pdf_analyze, limit_pdf_render
from taproom.services.events import resolve_for_pdf
from taproom.utils.dates import parse_yyyy_mm_dd
from taproom.utils.slugify import event_form_filename

log = logging.getLogger(__name__)

router = APIRouter(tags=["pdf"])

Strategy = Literal["combined", "fields", "coordinates"]


class PostedBeerIn(BaseModel):
    beer_style: str = Field(default="", max_length=128)
    packaging: str = Field(default="", max_length=32)
    quantity: int | None = Field(default=None, ge=0, le=10000)


class PostedEventIn(BaseModel):
    """Client-side event object; unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore")

    title: str = Field(default="", max_length=200)
    date: str | None = Field(default=None, description="YYYY-MM-DD")
    time: str | None = Field(default=None, max_length=32)
    setup_time: str | None = Field(default=None, max_length=32)
    duration: str | None = Field(default=None, max_length=64)
    contact_name: str | None = Field(default=None, max_length=128)
    contact_phone: str | None = Field(default=None, max_length=40)
    expected_attendees: int | str | None = None
    event_type: str | None = Field(default=None, max_length=32)
    event_type_other: str | None = Field(default=None, max_length=128)
    event_instructions: str | None = None
    info: str | None = None
    off_prem: bool = False
    supplies: dict[str, bool | str | None] = Field(default_factory=dict)
    beers: list[PostedBeerIn] = Field(default_factory=list)
    staff: list[str] | str | None = None
    staffAttending: list[str] | str | None = None
    staff_attending: list[str] | str | None = None


def get_pdf_template() -> bytes:
    """Bytes of the configured event form; overridden in tests."""
    try:
        return load_template(get_settings().pdf_template_path)
    except PdfRenderError as e:
        log.error("%s", e)
        raise HTTPException(status_code=500, detail="PDF template is not available") from e


def _pdf_response(template: bytes, sheet: EventSheet, strategy: str) -> Response:
    try:
        content = render_event_pdf(
            template,
            sheet,
            strategy=strategy,
            field_map=get_field_map(get_settings().pdf_field_map_version),
        )
    except PdfRenderError as e:
        log.error("Event form for %r failed: %s", sheet.title, e)
        raise HTTPException(status_code=500, detail=str(e)) from e

    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{event_form_filename(sheet.title)}"'},
    )


@router.get("/api/v1/pdf/analyze")
@limit_pdf_analyze()
def analyze(
    request: Request,
    _admin=Depends(require_admin),
    template: bytes = Depends(get_pdf_template),
) -> dict[str, Any]:
    """List the template's form fields; read-only."""
    return analyze_template(template)


@router.post("/api/v1/pdf/event")
@limit_pdf_render()
def render_posted_event(
    request: Request,
    body: PostedEventIn,
    strategy: Strategy = Query(default="combined"),
    _user=Depends(require_user),
    template: bytes = Depends(get_pdf_template),
):
    """Fill the event form from a client-side event object."""
    if body.date:
        try:
            parse_yyyy_mm_dd(body.date)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
    sheet = EventSheet.from_payload(body.model_dump())
    return _pdf_response(template, sheet, strategy)


@router.get("/api/v1/events/{event_id}/pdf")
@limit_pdf_render()
def render_stored_event(
    request: Request,
    event_id: int,
    strategy: Strategy = Query(default="combined"),
    _user=Depends(require_user),
    db: Session = Depends(get_db),
    template: bytes = Depends(get_pdf_template),
):
    with service_errors("Event"):
        sheet = resolve_for_pdf(db, event_id)
    return _pdf_response(template, sheet, strategy)
