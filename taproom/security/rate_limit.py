"""Rate limiting for the taproom backend.

In-process, per-worker limiter (SlowAPI) keyed by client IP. Applied at
minimum to login and to PDF generation, which is the most expensive route.

Behind Nginx the real client address arrives in X-Real-IP:
  proxy_set_header X-Real-IP $remote_addr;
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address


def _real_ip_keyfunc(request: Request) -> str:
    x_real = request.headers.get("x-real-ip")
    if x_real:
        return x_real.strip()
    return get_remote_address(request)


limiter = Limiter(
    key_func=_real_ip_keyfunc,
    default_limits=[],
    headers_enabled=False,
)


def init_rate_limiting(app: FastAPI) -> None:
    """Attach SlowAPI middleware and the JSON 429 handler."""

    @app.exception_handler(RateLimitExceeded)
    def _rate_limit_handler(request: Request, exc: RateLimitExceeded):
        return JSONResponse(
            status_code=429,
            content={
                "error": {
                    "code": "RATE_LIMITED",
                    "message": "Too many requests. Please try again later.",
                }
            },
        )

    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)


class TaproomRateLimits:
    """Centralized limits (string syntax as SlowAPI expects)."""

    LOGIN = "10/minute"
    PDF_RENDER = "30/minute"
    PDF_ANALYZE = "10/minute"


def limit_login(route_limit: str | None = None):
    return limiter.limit(route_limit or TaproomRateLimits.LOGIN)


def limit_pdf_render(route_limit: str | None = None):
    return limiter.limit(route_limit or TaproomRateLimits.PDF_RENDER)


def limit_pdf_analyze(route_limit: str | None = None):
    return limiter.limit(route_limit or TaproomRateLimits.PDF_ANALYZE)
