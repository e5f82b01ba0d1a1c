from __future__ import annotations

import io
from collections.abc import Iterable
from dataclasses import dataclass

from pypdf import PageObject, PdfReader
from reportlab.pdfgen import canvas

from taproom.pdf.sheet import EventSheet

FONT_NAME = "Helvetica"
FONT_SIZE = 10

# Page-1 positions (PDF points, origin bottom-left) of the beer table on the
# letter-size event form. Redesigning the form means re-measuring these.
BEER_ROW_Y: tuple[float, ...] = (262.0, 244.0, 226.0, 208.0, 190.0)
BEER_COLUMN_X = {"beer_style": 74.0, "packaging": 318.0, "quantity": 480.0}

# Used only when the template has no usable form fields at all.
SHEET_TEXT_POSITIONS: dict[str, tuple[float, float]] = {
    "event_name": (150.0, 688.0),
    "event_date": (150.0, 668.0),
    "setup_time": (420.0, 668.0),
    "duration": (150.0, 648.0),
    "staff": (150.0, 628.0),
    "contact": (150.0, 608.0),
    "attendees": (420.0, 608.0),
    "instructions": (74.0, 560.0),
    "additional_supplies": (74.0, 330.0),
}


@dataclass(frozen=True)
class TextPlacement:
    text: str
    x: float
    y: float


def plan_beer_rows(sheet: EventSheet, rows: tuple[float, ...] = BEER_ROW_Y) -> list[TextPlacement]:
    """Text placements for the beer table.

    Items beyond the fixed row count are dropped; empty values are skipped.
    """
    out: list[TextPlacement] = []
    for y, beer in zip(rows, sheet.beers):
        for column, x in BEER_COLUMN_X.items():
            value = getattr(beer, column)
            if not value:
                continue
            out.append(TextPlacement(text=str(value), x=x, y=y))
    return out


def sheet_text_values(sheet: EventSheet) -> dict[str, str]:
    """Logical text field -> display value, shared by both fill strategies."""
    values = {
        "event_name": sheet.title,
        "event_date": sheet.display_date,
        "setup_time": sheet.display_setup_time,
        "duration": sheet.duration or "",
        "staff": sheet.staff_attending,
        "contact": sheet.contact,
        "attendees": "" if sheet.expected_attendees is None else str(sheet.expected_attendees),
        "instructions": sheet.instructions,
        "additional_supplies": sheet.additional_supplies or "",
    }
    if sheet.event_type == "other":
        values["other_detail"] = sheet.event_type_other or ""
    return values


def plan_sheet_text(sheet: EventSheet) -> list[TextPlacement]:
    values = sheet_text_values(sheet)
    out: list[TextPlacement] = []
    for key, (x, y) in SHEET_TEXT_POSITIONS.items():
        value = values.get(key)
        if value:
            out.append(TextPlacement(text=value, x=x, y=y))
    return out


def render_overlay(placements: Iterable[TextPlacement], width: float, height: float) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=(width, height))
    c.setFillColorRGB(0, 0, 0)
    c.setFont(FONT_NAME, FONT_SIZE)
    for p in placements:
        c.drawString(p.x, p.y, p.text)
    c.showPage()
    c.save()
    return buf.getvalue()


def stamp_page(page: PageObject, placements: list[TextPlacement]) -> None:
    if not placements:
        return
    overlay = render_overlay(placements, float(page.mediabox.width), float(page.mediabox.height))
    page.merge_page(PdfReader(io.BytesIO(overlay)).pages[0])
