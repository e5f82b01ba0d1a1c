# ruff: noqa: B008
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from taproom.api.deps import SESSION_EMAIL_KEY, current_employee
from taproom.db.session import get_db
from taproom.security.csrf import csrf_issue_token
from taproom.security.identity import IdentityError, OAuthIdentityProvider, get_identity_provider
from taproom.security.rate_limit import limit_login
from taproom.services.employees import find_by_email

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


class SessionIn(BaseModel):
    access_token: str = Field(min_length=1, max_length=4096)


class MeOut(BaseModel):
    authenticated: bool
    id: int | None = None
    name: str | None = None
    email: str | None = None
    is_admin: bool = False
    csrf_token: str | None = None


class OkOut(BaseModel):
    ok: bool = True


@router.post("/session", response_model=MeOut)
@limit_login()
def create_session(
    request: Request,
    response: Response,
    body: SessionIn,
    db: Session = Depends(get_db),
    provider: OAuthIdentityProvider = Depends(get_identity_provider),
):
    """Exchange a provider access token for a session cookie.

    Only emails registered on an employee record can sign in.
    """
    try:
        identity = provider.resolve(body.access_token)
    except IdentityError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e)) from e

    emp = find_by_email(db, identity.email)
    if emp is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="No employee is registered with this email")

    request.session.clear()
    request.session[SESSION_EMAIL_KEY] = emp.email
    token = csrf_issue_token(request, response)
    return MeOut(authenticated=True, id=emp.id, name=emp.name, email=emp.email, is_admin=emp.is_admin, csrf_token=token)


@router.delete("/session", response_model=OkOut)
def delete_session(request: Request):
    request.session.clear()
    return OkOut()


@router.get("/me", response_model=MeOut)
def me(request: Request, response: Response, db: Session = Depends(get_db)):
    emp = current_employee(request, db)
    if emp is None:
        return MeOut(authenticated=False)
    token = csrf_issue_token(request, response)
    return MeOut(authenticated=True, id=emp.id, name=emp.name, email=emp.email, is_admin=emp.is_admin, csrf_token=token)
