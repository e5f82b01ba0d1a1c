# ruff: noqa: B008
from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from taproom.api.deps import require_admin
from taproom.api.errors import service_errors
from taproom.db.models import Employee
from taproom.db.session import get_db
from taproom.security.csrf import require_csrf
from taproom.services import employees as svc
from taproom.services.schedule import list_employees

router = APIRouter(prefix="/api/v1/employees", tags=["employees"])


class EmployeeOut(BaseModel):
    id: int
    name: str
    email: str | None = None
    phone: str | None = None
    is_admin: bool = False


class EmployeeListOut(BaseModel):
    employees: list[EmployeeOut]


class EmployeeCreateIn(BaseModel):
    name: str = Field(min_length=1, max_length=128)
    email: str | None = Field(default=None, max_length=160)
    phone: str | None = Field(default=None, max_length=40)
    is_admin: bool = False


class EmployeeUpdateIn(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=128)
    email: str | None = Field(default=None, max_length=160)
    phone: str | None = Field(default=None, max_length=40)
    is_admin: bool | None = None


class OkOut(BaseModel):
    ok: bool = True


def _out(emp: Employee) -> EmployeeOut:
    return EmployeeOut(id=emp.id, name=emp.name, email=emp.email, phone=emp.phone, is_admin=emp.is_admin)


@router.get("", response_model=EmployeeListOut)
def list_all(_admin=Depends(require_admin), db: Session = Depends(get_db)):
    with service_errors("Employee"):
        return EmployeeListOut(employees=[_out(e) for e in list_employees(db)])


@router.post("", response_model=EmployeeOut)
def create(
    payload: EmployeeCreateIn,
    _admin=Depends(require_admin),
    _: None = Depends(require_csrf),
    db: Session = Depends(get_db),
):
    with service_errors("Employee"):
        return _out(svc.create_employee(db, payload.model_dump()))


@router.put("/{employee_id}", response_model=EmployeeOut)
def update(
    employee_id: int,
    payload: EmployeeUpdateIn,
    _admin=Depends(require_admin),
    _: None = Depends(require_csrf),
    db: Session = Depends(get_db),
):
    with service_errors("Employee"):
        return _out(svc.update_employee(db, employee_id, payload.model_dump(exclude_unset=True)))


@router.delete("/{employee_id}", response_model=OkOut)
def delete(
    employee_id: int,
    _admin=Depends(require_admin),
    _: None = Depends(require_csrf),
    db: Session = Depends(get_db),
):
    """Delete an employee; their event assignments go too, shifts keep the name."""
    with service_errors("Employee"):
        svc.delete_employee(db, employee_id)
    return OkOut()
