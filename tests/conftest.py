from __future__ import annotations

import os

os.environ.setdefault("TAPROOM_DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("TAPROOM_SESSION_SECRET", "s" * 32)
os.environ.setdefault("TAPROOM_CSRF_SECRET", "c" * 32)
os.environ.setdefault("TAPROOM_COOKIE_SECURE", "false")
os.environ.setdefault("TAPROOM_PDF_TEMPLATE_PATH", "/nonexistent/event_form_template.pdf")
os.environ.setdefault("TAPROOM_RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from taproom.api.deps import require_admin, require_user
from taproom.db.models import Base
from taproom.db.session import get_db
from taproom.main import create_app
from taproom.security.csrf import require_csrf


def make_sessionmaker() -> sessionmaker[Session]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture()
def session_local() -> sessionmaker[Session]:
    return make_sessionmaker()


@pytest.fixture()
def db(session_local: sessionmaker[Session]):
    with session_local() as s:
        yield s


@pytest.fixture()
def app_client(session_local: sessionmaker[Session]) -> TestClient:
    """The full application (error envelopes included) with auth stubbed out."""
    app = create_app()

    def override_db():
        db = session_local()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[require_admin] = lambda: {"ok": True}
    app.dependency_overrides[require_user] = lambda: {"ok": True}
    app.dependency_overrides[require_csrf] = lambda: None
    return TestClient(app)
