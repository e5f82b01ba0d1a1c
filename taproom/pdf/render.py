"""Event form rendering.

Strategies:
- ``fields``: everything goes into AcroForm fields, including the beer table.
- ``coordinates``: everything is drawn as text on page 1, fields are ignored.
- ``combined`` (default): fields for the header and checkboxes, the beer
  table drawn at fixed positions.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PdfReadError

from taproom.config import get_settings
from taproom.pdf.analyze import form_field_kinds
from taproom.pdf.field_map import FieldMap, FieldMapReport, get_field_map, validate_field_map
from taproom.pdf.form_fill import resolve_checkbox_states, resolve_text_values, set_checkboxes, set_text_fields
from taproom.pdf.overlay import plan_beer_rows, plan_sheet_text, stamp_page
from taproom.pdf.sheet import EventSheet

log = logging.getLogger(__name__)

STRATEGIES = ("combined", "fields", "coordinates")


class PdfRenderError(Exception):
    pass


def load_template(path: str | Path) -> bytes:
    p = Path(path)
    if not p.is_file():
        raise PdfRenderError(f"PDF template not found: {p}")
    return p.read_bytes()


def render_event_pdf(
    template_bytes: bytes,
    sheet: EventSheet,
    *,
    strategy: str = "combined",
    field_map: FieldMap | None = None,
) -> bytes:
    if strategy not in STRATEGIES:
        raise ValueError(f"Unknown PDF strategy: {strategy}")
    fmap = field_map or get_field_map(get_settings().pdf_field_map_version)

    try:
        reader = PdfReader(io.BytesIO(template_bytes))
    except PdfReadError as e:
        raise PdfRenderError("PDF template could not be read") from e
    if not reader.pages:
        raise PdfRenderError("PDF template has no pages")

    kinds = form_field_kinds(reader)
    writer = PdfWriter(clone_from=reader)

    if strategy != "coordinates" and kinds:
        text_names = [n for n, k in kinds.items() if k == "text"]
        box_names = [n for n, k in kinds.items() if k == "checkbox"]
        set_text_fields(
            writer,
            resolve_text_values(sheet, fmap, text_names, include_beers=strategy == "fields"),
        )
        set_checkboxes(writer, resolve_checkbox_states(sheet, fmap, box_names))

    placements = []
    if strategy == "coordinates" or (strategy == "combined" and not kinds):
        placements.extend(plan_sheet_text(sheet))
    if strategy != "fields":
        placements.extend(plan_beer_rows(sheet))
    stamp_page(writer.pages[0], placements)

    out = io.BytesIO()
    writer.write(out)
    log.info("Rendered event form %r strategy=%s fields=%s drawn=%s", sheet.title, strategy, len(kinds), len(placements))
    return out.getvalue()


def check_template(template_bytes: bytes, version: str) -> FieldMapReport:
    """Validate a template against a field map version once, at startup."""
    reader = PdfReader(io.BytesIO(template_bytes))
    report = validate_field_map(form_field_kinds(reader).keys(), get_field_map(version))
    if report.ok:
        log.info("PDF template matches field map %s", version)
    else:
        log.warning("PDF template is missing %d field(s) of map %s: %s", len(report.missing), version, ", ".join(report.missing))
    return report
