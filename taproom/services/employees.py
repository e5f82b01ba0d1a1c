from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from taproom.db.models import Employee
from taproom.services.errors import NotFoundError, ServiceError

log = logging.getLogger(__name__)

EMPLOYEE_FIELDS = ("name", "email", "phone", "is_admin")


class DuplicateEmployeeError(ServiceError):
    pass


def _clean(data: Mapping[str, Any]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for key in EMPLOYEE_FIELDS:
        if key not in data:
            continue
        value = data[key]
        if isinstance(value, str):
            value = value.strip() or None
        values[key] = value
    if values.get("email"):
        values["email"] = values["email"].lower()
    return values


def get_employee(db: Session, employee_id: int) -> Employee:
    emp = db.get(Employee, employee_id)
    if emp is None:
        raise NotFoundError("Employee", employee_id)
    return emp


def find_by_email(db: Session, email: str) -> Employee | None:
    if not email:
        return None
    return (
        db.execute(select(Employee).where(func.lower(Employee.email) == email.strip().lower()))
        .scalars()
        .first()
    )


def _check_email_free(db: Session, email: str | None, *, exclude_id: int | None = None) -> None:
    if not email:
        return
    other = find_by_email(db, email)
    if other is not None and other.id != exclude_id:
        raise DuplicateEmployeeError(f"An employee with email {email} already exists")


def create_employee(db: Session, data: Mapping[str, Any]) -> Employee:
    values = _clean(data)
    if not values.get("name"):
        raise ValueError("Employee name is required")
    _check_email_free(db, values.get("email"))
    emp = Employee(**values)
    db.add(emp)
    db.commit()
    db.refresh(emp)
    log.info("Created employee %s (%s)", emp.id, emp.name)
    return emp


def update_employee(db: Session, employee_id: int, data: Mapping[str, Any]) -> Employee:
    """Update the given fields.

    Renaming does not rewrite ``schedules.employee_name``; rows linked by
    ``employee_id`` keep matching the renamed employee.
    """
    emp = get_employee(db, employee_id)
    values = _clean(data)
    if "name" in values and not values["name"]:
        raise ValueError("Employee name is required")
    _check_email_free(db, values.get("email"), exclude_id=emp.id)
    for k, v in values.items():
        setattr(emp, k, v)
    db.commit()
    db.refresh(emp)
    return emp


def delete_employee(db: Session, employee_id: int) -> None:
    emp = get_employee(db, employee_id)
    db.delete(emp)
    db.commit()
    log.info("Deleted employee %s", employee_id)
