"""Persistence layer: engine, sessions and ORM models."""

from injaz.db.session import Base, get_db, get_engine, get_session_factory, init_db, session_scope

__all__ = [
    "Base",
    "get_db",
    "get_engine",
    "get_session_factory",
    "init_db",
    "session_scope",
]
