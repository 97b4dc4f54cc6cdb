"""Engine, session factory and FastAPI session dependency."""

from collections.abc import Iterator
from contextlib import contextmanager
from functools import lru_cache
from typing import Any

import structlog
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from injaz.config import get_settings

logger = structlog.get_logger(__name__)

Base = declarative_base()


def build_engine(database_url: str, echo: bool = False, **kwargs: Any) -> Engine:
    """Create an engine; SQLite connections may be shared across threads."""
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=echo, **kwargs)

    engine = create_engine(
        database_url, echo=echo, connect_args={"check_same_thread": False}, **kwargs
    )

    # Let SQLAlchemy emit BEGIN itself so SAVEPOINTs behave under pysqlite
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


@lru_cache
def get_engine() -> Engine:
    settings = get_settings()
    return build_engine(settings.database_url, echo=settings.database_echo)


@lru_cache
def get_session_factory() -> sessionmaker[Session]:
    return sessionmaker(autocommit=False, autoflush=True, bind=get_engine())


def init_db(engine: Engine | None = None) -> None:
    """Create all tables that do not exist yet."""
    # Registers every model on Base.metadata
    from injaz.db import models  # noqa: F401

    engine = engine or get_engine()
    Base.metadata.create_all(bind=engine)
    logger.info("database_initialized", url=engine.url.render_as_string(hide_password=True))


def get_db() -> Iterator[Session]:
    """FastAPI dependency yielding a session that is always closed."""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Transactional scope for scripts and background work."""
    db = get_session_factory()()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
