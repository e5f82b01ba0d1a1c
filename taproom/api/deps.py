from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from taproom.db.models import Employee
from taproom.db.session import get_db
from taproom.services.employees import find_by_email

SESSION_EMAIL_KEY = "email"


def current_employee(request: Request, db: Session) -> Employee | None:
    email = request.session.get(SESSION_EMAIL_KEY)
    if not email:
        return None
    return find_by_email(db, email)


def require_user(request: Request, db: Session = Depends(get_db)) -> Employee:
    """Require a logged-in employee.

    The session cookie (SessionMiddleware) carries the email set at login.
    """
    emp = current_employee(request, db)
    if emp is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return emp


def require_admin(user: Employee = Depends(require_user)) -> Employee:
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user
