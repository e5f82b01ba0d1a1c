from __future__ import annotations

import enum
from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class EventType(str, enum.Enum):
    TASTING = "tasting"
    PINT_NIGHT = "pint_night"
    BEER_FEST = "beer_fest"
    OTHER = "other"


class ShiftTag(str, enum.Enum):
    TASTING = "tasting"
    OFFSITE = "offsite"
    PACKAGING = "packaging"
    EVENT = "event"


class Packaging(str, enum.Enum):
    DRAFT = "Draft"
    BOTTLES = "Bottles"
    CANS = "Cans"


class Employee(Base):
    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    email: Mapped[str | None] = mapped_column(String(160), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(40), nullable=True)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="0")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    shifts: Mapped[list[Shift]] = relationship(back_populates="employee")
    assignments: Mapped[list[EventAssignment]] = relationship(
        back_populates="employee", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_employees_name", "name"),
        Index("ix_employees_email", "email"),
    )


class Shift(Base):
    """One row of the weekly schedule.

    ``employee_name`` is the historical denormalized link; ``employee_id`` is
    filled for new rows and backfilled for old ones by reconciliation.
    Rows with ``event_id`` set belong to an event and are read-only here.
    """

    __tablename__ = "schedules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True
    )
    employee_name: Mapped[str] = mapped_column(String(128), nullable=False)
    day: Mapped[str] = mapped_column(String(3), nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    shift: Mapped[str | None] = mapped_column(String(64), nullable=True)
    event_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    event_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    event_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    employee: Mapped[Employee | None] = relationship(back_populates="shifts")

    __table_args__ = (
        Index("ix_schedules_date", "date"),
        Index("ix_schedules_employee_id", "employee_id"),
        Index("ix_schedules_employee_name", "employee_name"),
    )


class ScheduleTemplate(Base):
    """Seasonal (``date`` is null) or holiday (``date`` set) weekly pattern.

    ``template`` is JSON text: {"Monday": [{"employeeId": 1, "shift": "Tasting Room"}], ...}
    """

    __tablename__ = "holidays"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    date: Mapped[date | None] = mapped_column(Date, nullable=True)
    template: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Event(Base):
    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    # Stored as "HH:MM" when entered through the API; older rows may hold free text.
    time: Mapped[str | None] = mapped_column(String(32), nullable=True)
    setup_time: Mapped[str | None] = mapped_column(String(32), nullable=True)
    duration: Mapped[str | None] = mapped_column(String(64), nullable=True)
    contact_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    contact_phone: Mapped[str | None] = mapped_column(String(40), nullable=True)
    expected_attendees: Mapped[int | None] = mapped_column(Integer, nullable=True)
    event_type: Mapped[str] = mapped_column(
        String(32), nullable=False, default=EventType.TASTING.value, server_default=EventType.TASTING.value
    )
    event_type_other: Mapped[str | None] = mapped_column(String(128), nullable=True)
    event_instructions: Mapped[str | None] = mapped_column(Text, nullable=True)
    off_prem: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="0")
    info: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    supplies: Mapped[EventSupplies | None] = relationship(
        back_populates="event", cascade="all, delete-orphan", uselist=False
    )
    beers: Mapped[list[EventBeer]] = relationship(
        back_populates="event", cascade="all, delete-orphan", order_by="EventBeer.position"
    )
    notes: Mapped[EventNotes | None] = relationship(
        back_populates="event", cascade="all, delete-orphan", uselist=False
    )
    assignments: Mapped[list[EventAssignment]] = relationship(
        back_populates="event", cascade="all, delete-orphan"
    )
    # Persisted rows that carry this event's linkage go with it.
    linked_shifts: Mapped[list[Shift]] = relationship(cascade="all, delete-orphan")

    __table_args__ = (Index("ix_events_date", "date"),)


class EventSupplies(Base):
    __tablename__ = "event_supplies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    table_needed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    beer_buckets: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    table_cloth: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    tent_weights: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    signage: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    ice: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    jockey_box: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    cups: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    additional_supplies: Mapped[str | None] = mapped_column(Text, nullable=True)

    event: Mapped[Event] = relationship(back_populates="supplies")


class EventBeer(Base):
    __tablename__ = "event_beers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    beer_style: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    packaging: Mapped[str] = mapped_column(String(16), nullable=False, default=Packaging.DRAFT.value)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    event: Mapped[Event] = relationship(back_populates="beers")

    __table_args__ = (Index("ix_event_beers_event_id", "event_id"),)


class EventNotes(Base):
    """Post-event wrap-up, one row per event."""

    __tablename__ = "event_notes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    attendance_actual: Mapped[int | None] = mapped_column(Integer, nullable=True)
    beers_sold: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, onupdate=func.now())

    event: Mapped[Event] = relationship(back_populates="notes")


class EventAssignment(Base):
    __tablename__ = "event_assignments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False
    )
    employee_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    event: Mapped[Event] = relationship(back_populates="assignments")
    employee: Mapped[Employee] = relationship(back_populates="assignments")

    __table_args__ = (
        UniqueConstraint("event_id", "employee_id", name="uq_event_assignment_event_employee"),
        Index("ix_event_assignments_event_id", "event_id"),
        Index("ix_event_assignments_employee_id", "employee_id"),
    )
