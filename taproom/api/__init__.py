from fastapi import APIRouter

from .v1.auth import router as auth_router
from .v1.employees import router as employees_router
from .v1.events import router as events_router
from .v1.pdf import router as pdf_router
from .v1.schedule import router as schedule_router
from .v1.templates import router as templates_router


def build_api_router() -> APIRouter:
    """Build and return the root API router.

    Every v1 router already carries its full "/api/v1/..." prefix, so they are
    included here without extra prefixes.
    """

    api = APIRouter()
    api.include_router(auth_router)
    api.include_router(employees_router)
    api.include_router(schedule_router)
    api.include_router(templates_router)
    api.include_router(pdf_router)
    api.include_router(events_router)
    return api
