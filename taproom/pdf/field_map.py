"""Logical event-sheet fields mapped to the form field names of each template.

A template redesign gets a new ``FieldMap`` version rather than an edit in
place. ``validate_field_map`` is run once at startup against the configured
template so missing names show up in the log instead of per request.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

MAX_BEER_ROWS = 5


@dataclass(frozen=True)
class FieldMap:
    version: str
    text_fields: dict[str, str]
    checkboxes: dict[str, str]
    beer_rows: tuple[tuple[str, str, str], ...]

    def all_names(self) -> list[str]:
        names = list(self.text_fields.values()) + list(self.checkboxes.values())
        for row in self.beer_rows:
            names.extend(row)
        return names


def _beer_rows(count: int) -> tuple[tuple[str, str, str], ...]:
    return tuple(
        (f"Beer Style {i}", f"Package Style {i}", f"Quantity {i}") for i in range(1, count + 1)
    )


FIELD_MAPS: dict[str, FieldMap] = {
    "2024.1": FieldMap(
        version="2024.1",
        text_fields={
            "event_name": "Event Name",
            "event_date": "Event Date",
            "setup_time": "Event Set Up Time",
            "duration": "Event Duration",
            "staff": "DP Staff Attending",
            "contact": "Event Contact",
            "attendees": "Expected Attendees",
            "instructions": "Event Instructions",
            "additional_supplies": "Additional Supplies",
            "other_detail": "Other More Detail",
        },
        checkboxes={
            "type_tasting": "Tasting",
            "type_pint_night": "Pint Night",
            "type_beer_fest": "Beer Fest",
            "type_other": "Other",
            "table_needed": "Table",
            "beer_buckets": "Beer Buckets",
            "table_cloth": "Table Cloth",
            "tent_weights": "Tent Weights",
            "signage": "Signage",
            "ice": "Ice",
            "jockey_box": "Jockey Box",
            "cups": "Cups",
        },
        beer_rows=_beer_rows(MAX_BEER_ROWS),
    ),
}


def get_field_map(version: str) -> FieldMap:
    try:
        return FIELD_MAPS[version]
    except KeyError:
        raise ValueError(f"Unknown PDF field map version: {version}") from None


_TRAILING_NUM_RE = re.compile(r"^(.*?)[\s_#]*(\d+)$")


def name_variations(name: str) -> list[str]:
    """Spellings the same form field has shown up under."""
    out: list[str] = []

    def add(v: str) -> None:
        if v and v != name and v not in out:
            out.append(v)

    add(name.lower())
    add(name.upper())
    add(name.title())
    add(name.replace(" ", "_"))
    add(name.replace(" ", ""))
    add(name.lower().replace(" ", "_"))
    add(f"{name}:")

    m = _TRAILING_NUM_RE.match(name)
    if m:
        stem, num = m.group(1).strip(), m.group(2)
        add(f"{stem} #{num}")
        add(f"{stem}#{num}")
        add(f"{stem}_{num}")
        add(f"{stem}{num}")
        add(f"{stem.replace(' ', '')}{num}")
    return out


def find_field(name: str, available: Sequence[str]) -> str | None:
    """Resolve a wanted field name against the names a template really has.

    Exact name first, then the known variations, then the first field whose
    name contains the wanted one (case-insensitive).
    """
    if not name:
        return None
    if name in available:
        return name
    for variant in name_variations(name):
        if variant in available:
            return variant
    needle = name.lower()
    for candidate in available:
        if needle in candidate.lower():
            return candidate
    return None


@dataclass
class FieldMapReport:
    version: str
    missing: list[str] = field(default_factory=list)
    unmapped: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.missing


def validate_field_map(field_names: Iterable[str], field_map: FieldMap) -> FieldMapReport:
    """Compare a template's fields with the mapping by exact name."""
    present = set(field_names)
    wanted = field_map.all_names()
    wanted_set = set(wanted)
    return FieldMapReport(
        version=field_map.version,
        missing=[n for n in wanted if n not in present],
        unmapped=sorted(n for n in present if n not in wanted_set),
    )
