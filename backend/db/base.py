"""Database engine and sessions for the session, user and candidate stores."""

import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from backend.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


# Built on first use so the app and tests can start without DATABASE_URL
_engine: Engine | None = None
_SessionLocal: sessionmaker | None = None


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # Sessions are opened in the threadpool and used on the event loop
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,  # the agent can hold a chat request open for minutes
        "pool_recycle": 300,
    }


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        if not settings.database_url:
            raise ValueError("DATABASE_URL not configured")
        _engine = create_engine(settings.database_url, **_engine_options(settings.database_url))
    return _engine


def get_session_factory() -> sessionmaker:
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _SessionLocal


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request."""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session for work outside a request (CLI commands)."""
    db = get_session_factory()()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db() -> None:
    """Create missing tables. Schema changes go through Alembic."""
    from backend.db import tables  # noqa: F401

    Base.metadata.create_all(bind=get_engine())
    logger.info("Database tables ready")


def dispose_engine() -> None:
    """Close pooled connections and forget the engine."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None
