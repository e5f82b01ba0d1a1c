from __future__ import annotations

import logging
import os
import time
from typing import Any, Protocol, cast

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pypdf.errors import PdfReadError
from starlette.middleware.sessions import SessionMiddleware
from starlette.responses import JSONResponse

from taproom.api import build_api_router
from taproom.config import Settings, get_settings
from taproom.logging_conf import configure_logging
from taproom.pdf.render import check_template
from taproom.security.rate_limit import init_rate_limiting, limiter

log = logging.getLogger(__name__)


class _LimiterWithDefaults(Protocol):
    default_limits: list[str]


def _now_ms() -> int:
    return int(time.time() * 1000)


def _check_pdf_template(settings: Settings) -> None:
    """Log once whether the configured event form matches its field map."""
    path = settings.pdf_template_path
    if not os.path.isfile(path):
        log.warning("PDF template %s not found; event form downloads will fail", path)
        return
    try:
        with open(path, "rb") as f:
            check_template(f.read(), settings.pdf_field_map_version)
    except (OSError, PdfReadError, ValueError) as e:
        log.warning("PDF template %s could not be validated: %s", path, e)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(level=settings.log_level, log_file=settings.log_file)

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=None if settings.disable_docs else "/api/docs",
        redoc_url=None,
        openapi_url=None if settings.disable_docs else "/api/openapi.json",
    )

    # --- Middleware order matters: rate-limit early, sessions before endpoints.
    limiter.enabled = settings.rate_limit_enabled
    if settings.rate_limit_enabled:
        if settings.rate_limit_default_per_minute:
            limiter_with_defaults = cast(_LimiterWithDefaults, limiter)
            limiter_with_defaults.default_limits = [f"{settings.rate_limit_default_per_minute}/minute"]
        init_rate_limiting(app)

    # NOTE: Secure cookies require HTTPS; in local dev set TAPROOM_COOKIE_SECURE=false.
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=settings.session_cookie,
        https_only=settings.cookie_secure,
        same_site=settings.cookie_samesite,
        max_age=settings.session_max_age_seconds,
    )

    # CORS (only needed for local dev; in prod the SPA is served same-origin)
    if settings.cors_enabled:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_allow_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def request_timing(request: Request, call_next):
        start_ms = _now_ms()
        response = await call_next(request)
        response.headers["X-Request-Duration-Ms"] = str(_now_ms() - start_ms)
        return response

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        if request.url.path.startswith("/api/"):
            return JSONResponse(
                status_code=400,
                content={
                    "error": {
                        "code": "invalid_request",
                        "message": "Invalid request.",
                        "details": jsonable_encoder(exc.errors()),
                    }
                },
            )
        raise exc

    @app.get("/api/health", include_in_schema=False)
    async def health() -> dict[str, Any]:
        return {"ok": True}

    @app.get("/api/version", include_in_schema=False)
    async def version() -> dict[str, Any]:
        return {
            "backend_deploy_tag": settings.deploy_tag,
            "environment": settings.environment,
            "pdf_field_map_version": settings.pdf_field_map_version,
        }

    app.include_router(build_api_router())

    # Consistent JSON error for unhandled exceptions in API paths.
    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        log.exception("Unhandled error on %s %s", request.method, request.url.path)
        if request.url.path.startswith("/api/"):
            return JSONResponse(
                status_code=500,
                content={"error": {"code": "internal_error", "message": "Internal server error"}},
            )
        raise exc

    _check_pdf_template(settings)
    return app


app = create_app()
