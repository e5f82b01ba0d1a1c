from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from taproom.utils.dates import format_date_display, format_time_12h


@dataclass(frozen=True)
class BeerLine:
    beer_style: str
    packaging: str
    quantity: int | None


@dataclass
class EventSheet:
    """Everything printed on an event form, already joined and resolved."""

    title: str
    date: str | None = None
    time: str | None = None
    setup_time: str | None = None
    duration: str | None = None
    contact_name: str | None = None
    contact_phone: str | None = None
    expected_attendees: int | str | None = None
    event_type: str | None = None
    event_type_other: str | None = None
    event_instructions: str | None = None
    info: str | None = None
    off_prem: bool = False
    supplies: dict[str, bool] = field(default_factory=dict)
    additional_supplies: str | None = None
    beers: list[BeerLine] = field(default_factory=list)
    staff: list[str] = field(default_factory=list)

    @property
    def display_date(self) -> str:
        return format_date_display(self.date)

    @property
    def display_time(self) -> str:
        return format_time_12h(self.time)

    @property
    def display_setup_time(self) -> str:
        return format_time_12h(self.setup_time)

    @property
    def staff_attending(self) -> str:
        return ", ".join(self.staff)

    @property
    def contact(self) -> str:
        if not self.contact_name:
            return ""
        return f"{self.contact_name} {self.contact_phone or ''}".strip()

    @property
    def instructions(self) -> str:
        return self.event_instructions or self.info or ""

    def supply(self, flag: str) -> bool:
        return bool(self.supplies.get(flag))

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> EventSheet:
        """Build a sheet from a client-posted JSON event.

        Staff may arrive as a list of names or as one preformatted string
        (``staffAttending``).
        """
        staff_raw = data.get("staff") or data.get("staffAttending") or data.get("staff_attending") or []
        if isinstance(staff_raw, str):
            staff = [s.strip() for s in staff_raw.split(",") if s.strip()]
        else:
            staff = [str(s) for s in staff_raw if s]

        supplies_raw = dict(data.get("supplies") or {})
        additional = supplies_raw.pop("additional_supplies", None)

        beers = [
            BeerLine(
                beer_style=str(b.get("beer_style") or ""),
                packaging=str(b.get("packaging") or ""),
                quantity=b.get("quantity"),
            )
            for b in (data.get("beers") or [])
            if isinstance(b, Mapping)
        ]

        return cls(
            title=str(data.get("title") or ""),
            date=data.get("date"),
            time=data.get("time"),
            setup_time=data.get("setup_time"),
            duration=data.get("duration"),
            contact_name=data.get("contact_name"),
            contact_phone=data.get("contact_phone"),
            expected_attendees=data.get("expected_attendees"),
            event_type=data.get("event_type"),
            event_type_other=data.get("event_type_other"),
            event_instructions=data.get("event_instructions"),
            info=data.get("info"),
            off_prem=bool(data.get("off_prem")),
            supplies={k: bool(v) for k, v in supplies_raw.items()},
            additional_supplies=additional,
            beers=beers,
            staff=staff,
        )
