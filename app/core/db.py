"""
Database engine, session factory and declarative base
"""

import sqlite3
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings

DATABASE_URL = settings.DATABASE_URL


def is_memory_sqlite(url: str) -> bool:
    """True for SQLite URLs that point at an in-memory database"""
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


if is_memory_sqlite(DATABASE_URL):
    # One shared connection, otherwise every session sees its own empty database
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
elif DATABASE_URL.startswith("sqlite"):
    # SQLite doesn't support pool_size, max_overflow, or pool_recycle
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
    )
else:
    engine = create_engine(
        DATABASE_URL,
        pool_size=10,
        max_overflow=10,
        pool_pre_ping=True,
        pool_recycle=3600,
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def is_sqlite(db: Session) -> bool:
    """True when the session is bound to a SQLite database"""
    return db.get_bind().dialect.name == "sqlite"


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for FastAPI routes to get a database session.

    Each request gets its own session; nothing is shared between requests
    except the engine's connection pool.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@event.listens_for(Engine, "connect")
def enable_sqlite_foreign_keys(dbapi_conn, connection_record):
    """SQLite ignores ON DELETE CASCADE unless foreign keys are switched on."""
    if isinstance(dbapi_conn, sqlite3.Connection):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def init_db():
    """Create all tables. Models must be imported so they register on Base."""
    import app.models  # noqa: F401
    Base.metadata.create_all(bind=engine)
