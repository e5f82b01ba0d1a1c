from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from taproom.db.models import ShiftTag

# Template shift type -> stored category tag. A day with no entry is "Off".
SHIFT_TYPES: dict[str, str] = {
    "Tasting Room": ShiftTag.TASTING.value,
    "Offsite": ShiftTag.OFFSITE.value,
    "Packaging": ShiftTag.PACKAGING.value,
}

_TAG_DISPLAY: dict[str, str] = {
    ShiftTag.TASTING.value: "Tasting Room",
    ShiftTag.OFFSITE.value: "Offsite",
    ShiftTag.PACKAGING.value: "Packaging",
    ShiftTag.EVENT.value: "Event",
}

_TAG_CLASS: dict[str, str] = {
    ShiftTag.TASTING.value: "shift-tasting",
    ShiftTag.OFFSITE.value: "shift-offsite",
    ShiftTag.PACKAGING.value: "shift-packaging",
    ShiftTag.EVENT.value: "shift-event",
}


@dataclass(frozen=True)
class ShiftDisplay:
    title: str
    subtitle: str


def _get(shift: Any, key: str) -> Any:
    if isinstance(shift, Mapping):
        return shift.get(key)
    return getattr(shift, key, None)


def shift_class(event_type: str | None) -> str:
    return _TAG_CLASS.get(event_type or "", "shift-default")


def shift_type_tag(shift_type: str | None) -> str:
    """"Tasting Room" -> "tasting"; a missing type means a tasting shift.

    Raises ``ValueError`` for anything outside ``SHIFT_TYPES``.
    """
    if not shift_type:
        return ShiftTag.TASTING.value
    try:
        return SHIFT_TYPES[shift_type.strip()]
    except KeyError:
        raise ValueError(f"Unknown shift type: {shift_type}") from None


def is_event_shift(shift: Any) -> bool:
    return (
        bool(_get(shift, "event_id"))
        or _get(shift, "event_type") == ShiftTag.EVENT.value
        or bool(_get(shift, "event_name"))
    )


def format_shift_display(shift: Any) -> ShiftDisplay:
    label = _get(shift, "shift")
    event_name = _get(shift, "event_name")
    if event_name:
        return ShiftDisplay(title=event_name, subtitle=label or "Time TBD")

    tag = _get(shift, "event_type") or ""
    return ShiftDisplay(title=_TAG_DISPLAY.get(tag, tag), subtitle=label or "")


def is_employee_scheduled(grid: Mapping[str, Mapping[str, list]], employee_name: str, day: str) -> bool:
    return bool(grid.get(employee_name, {}).get(day))
