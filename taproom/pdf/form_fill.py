from __future__ import annotations

import logging
from collections.abc import Mapping

from pypdf import PdfWriter
from pypdf.generic import DictionaryObject, NameObject

from taproom.pdf.field_map import MAX_BEER_ROWS, FieldMap, find_field
from taproom.pdf.overlay import sheet_text_values
from taproom.pdf.sheet import EventSheet

log = logging.getLogger(__name__)

EVENT_TYPE_CHECKBOXES = {
    "type_tasting": "tasting",
    "type_pint_night": "pint_night",
    "type_beer_fest": "beer_fest",
    "type_other": "other",
}


def resolve_text_values(
    sheet: EventSheet,
    field_map: FieldMap,
    available: list[str],
    *,
    include_beers: bool = True,
) -> dict[str, str]:
    """Actual form field name -> value for every text field that resolves.

    Empty values and names the template does not have are skipped.
    """
    wanted: list[tuple[str, str]] = []
    for key, value in sheet_text_values(sheet).items():
        name = field_map.text_fields.get(key)
        if name:
            wanted.append((name, value))

    if include_beers:
        for names, beer in zip(field_map.beer_rows[:MAX_BEER_ROWS], sheet.beers):
            style_name, packaging_name, quantity_name = names
            wanted.append((style_name, beer.beer_style))
            wanted.append((packaging_name, beer.packaging))
            wanted.append((quantity_name, "" if beer.quantity is None else str(beer.quantity)))

    out: dict[str, str] = {}
    for name, value in wanted:
        if not value:
            continue
        actual = find_field(name, available)
        if actual is None:
            log.debug("PDF field %r not found in template, skipped", name)
            continue
        out[actual] = value
    return out


def resolve_checkbox_states(sheet: EventSheet, field_map: FieldMap, available: list[str]) -> dict[str, bool]:
    out: dict[str, bool] = {}
    for key, name in field_map.checkboxes.items():
        if name not in available:
            log.debug("PDF checkbox %r not found in template, skipped", name)
            continue
        if key in EVENT_TYPE_CHECKBOXES:
            out[name] = sheet.event_type == EVENT_TYPE_CHECKBOXES[key]
        else:
            out[name] = sheet.supply(key)
    return out


def _qualified_name(obj: DictionaryObject) -> str:
    parts: list[str] = []
    node: DictionaryObject | None = obj
    while node is not None:
        if "/T" in node:
            parts.append(str(node["/T"]))
        parent = node.get("/Parent")
        node = parent.get_object() if parent is not None else None
    return ".".join(reversed(parts))


def _on_state(widget: DictionaryObject) -> str:
    ap = widget.get("/AP")
    if ap is not None:
        normal = ap.get_object().get("/N")
        if normal is not None:
            for state in normal.get_object().keys():
                if state != "/Off":
                    return str(state)
    return "/Yes"


def set_checkboxes(writer: PdfWriter, states: Mapping[str, bool]) -> int:
    """Check or uncheck widgets by field name; returns the number touched."""
    touched = 0
    for page in writer.pages:
        for ref in page.get("/Annots") or []:
            widget = ref.get_object()
            if widget.get("/Subtype") != "/Widget":
                continue
            name = _qualified_name(widget)
            if name not in states:
                continue
            value = NameObject(_on_state(widget) if states[name] else "/Off")
            widget[NameObject("/AS")] = value
            holder = widget if "/T" in widget else widget["/Parent"].get_object()
            holder[NameObject("/V")] = value
            touched += 1
    return touched


def set_text_fields(writer: PdfWriter, values: Mapping[str, str]) -> None:
    if not values:
        return
    writer.set_need_appearances_writer(True)
    for page in writer.pages:
        if page.get("/Annots"):
            writer.update_page_form_field_values(page, dict(values))
