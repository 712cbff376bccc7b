"""
🔮 ONCHAIN PROPHECY · Sealed calls, public stakes.

Database connection and session management.
"""

from typing import Optional

from sqlalchemy import Engine, String, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.types import TypeDecorator

from prophecy.config import settings

# Base class for models
Base = declarative_base()


class Uint256(TypeDecorator):
    """Unsigned integer stored as a decimal string (SQLite INTEGER is 64-bit signed)."""

    impl = String(78)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = int(value)
        if value < 0:
            raise ValueError(f"Uint256 column cannot store negative value {value}")
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return int(value)


def create_db_engine(database_url: Optional[str] = None) -> Engine:
    """
    Create the SQLAlchemy engine.

    In-memory SQLite is pinned to a single connection so every session
    sees the same database.
    """
    url = database_url or settings.database_url
    if url.startswith("sqlite") and ":memory:" in url:
        return create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, echo=False)


def make_session_factory(engine: Engine) -> sessionmaker:
    """Create a session factory bound to the engine."""
    return sessionmaker(
        bind=engine,
        class_=Session,
        expire_on_commit=False,
        autoflush=False,
    )


def init_db(engine: Engine) -> None:
    """Initialize database (create tables)."""
    # Import models so every table is registered on Base.metadata
    from prophecy import models  # noqa: F401

    Base.metadata.create_all(engine)
