from __future__ import annotations

import hmac
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from fastapi import Header, HTTPException, Request, Response

from taproom.config import Settings, get_settings

CSRF_COOKIE = "taproom_csrf_token"


@dataclass(frozen=True)
class CsrfConfig:
    """Session-stored CSRF token.

    The token is issued at login and returned from /auth/me; state-changing
    requests echo it back in ``X-CSRF-Token`` (or the readable cookie).
    """

    header_name: str = "X-CSRF-Token"
    rotate_minutes: int = 120


class CsrfError(HTTPException):
    def __init__(self, detail: str = "CSRF validation failed"):
        super().__init__(status_code=403, detail=detail)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def issue_csrf_token(session: dict[str, Any]) -> str:
    token = secrets.token_urlsafe(32)
    session["csrf_token"] = token
    session["csrf_issued_at"] = _utcnow().isoformat()
    return token


def get_or_rotate_csrf_token(session: dict[str, Any], cfg: CsrfConfig | None = None) -> str:
    cfg = cfg or CsrfConfig()
    token = session.get("csrf_token")
    issued_at_raw = session.get("csrf_issued_at")

    if not token or not issued_at_raw:
        return issue_csrf_token(session)

    try:
        issued_at = datetime.fromisoformat(issued_at_raw)
    except (TypeError, ValueError):
        return issue_csrf_token(session)
    if issued_at.tzinfo is None:
        issued_at = issued_at.replace(tzinfo=UTC)

    if _utcnow() - issued_at > timedelta(minutes=cfg.rotate_minutes):
        return issue_csrf_token(session)
    return token


def csrf_issue_token(
    request: Request,
    response: Response | None = None,
    settings: Settings | None = None,
    cfg: CsrfConfig | None = None,
) -> str:
    """Store or rotate the token in the session; mirror it for the SPA."""
    settings = settings or get_settings()
    cfg = cfg or CsrfConfig()
    token = get_or_rotate_csrf_token(request.session, cfg)

    if response is not None:
        response.headers[cfg.header_name] = token
        response.set_cookie(
            CSRF_COOKIE,
            token,
            max_age=settings.session_max_age_seconds,
            secure=settings.cookie_secure,
            httponly=False,
            samesite=settings.cookie_samesite,
            path="/",
        )
    return token


async def require_csrf(
    request: Request,
    csrf_header: str | None = Header(default=None, alias="X-CSRF-Token"),
) -> None:
    """Dependency for state-changing endpoints; safe methods pass through."""
    if request.method in ("GET", "HEAD", "OPTIONS"):
        return

    expected = request.session.get("csrf_token")
    if not expected:
        raise CsrfError("Missing CSRF token in session")

    provided = (csrf_header or request.cookies.get(CSRF_COOKIE) or "").strip()
    if not provided:
        raise CsrfError("Missing CSRF token")
    if not hmac.compare_digest(provided, expected):
        raise CsrfError()
