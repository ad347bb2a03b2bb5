"""
SQLAlchemy declarative base and session factory.

Only the SQL-backed job store touches the database. Worker threads call the
store directly, so every session here is SYNC: one short-lived session per
store call, created and closed inside that call.

The engine is built on demand instead of at import time, so the in-memory
backend (and the test suite) never needs a database driver installed.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker


class Base(DeclarativeBase):
    """Base class for all ORM models. SQLAlchemy uses this to track table metadata."""
    pass


def create_session_factory(
    database_url: str, create_tables: bool = True, **engine_kwargs
) -> sessionmaker:
    """
    Build a sync engine for `database_url` and return a session factory bound to it.

    Extra keyword arguments go straight to create_engine() (tests pass a
    StaticPool so an in-memory SQLite database is shared across threads).
    """
    engine = create_engine(database_url, echo=False, **engine_kwargs)
    if create_tables:
        # Safe to call repeatedly, existing tables are left alone
        Base.metadata.create_all(engine)
    return sessionmaker(engine, expire_on_commit=False)
