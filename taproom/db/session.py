from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from taproom.config import get_settings

_engine: Engine | None = None
_SessionLocal: sessionmaker[Session] | None = None


def get_engine() -> Engine:
    """Process-wide SQLAlchemy Engine built from TAPROOM_DATABASE_URL.

    Only the engine is shared; request code receives its own Session through
    ``get_db`` and passes it explicitly into the service functions.
    """

    global _engine
    cfg = get_settings()

    if _engine is None:
        kwargs: dict = {"pool_pre_ping": True}
        if not cfg.database_url.startswith("sqlite"):
            kwargs.update(
                pool_size=cfg.db_pool_size,
                max_overflow=cfg.db_max_overflow,
                pool_timeout=cfg.db_pool_timeout_seconds,
            )
        _engine = create_engine(cfg.database_url, **kwargs)
    return _engine


def get_sessionmaker() -> sessionmaker[Session]:
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(bind=get_engine(), autoflush=False, autocommit=False)
    return _SessionLocal


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: yields a DB session and always closes."""

    SessionLocal = get_sessionmaker()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope(database_url: str | None = None) -> Generator[Session, None, None]:
    """Context manager for scripts and one-off tasks."""

    engine = create_engine(database_url, pool_pre_ping=True) if database_url else get_engine()
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
