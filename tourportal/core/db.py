# tourportal/core/db.py
from contextlib import contextmanager
import logging
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker, declarative_base, Session

from tourportal.core.config import DATABASE_URL
from tourportal.core.errors import Conflict

logger = logging.getLogger("tourportal.db")

# For SQLite we need check_same_thread False
engine = create_engine(
    DATABASE_URL,
    pool_pre_ping=True,
    future=True,
    connect_args=({"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}),
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
Base = declarative_base()


@event.listens_for(Engine, "connect")
def _sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores FOREIGN KEY clauses unless asked per connection
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Non-FastAPI contexts (scripts, services)."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def commit_or_conflict(db: Session, message: str = "Resource already exists") -> None:
    """Commit; a unique-constraint violation from the store becomes Conflict (409)."""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.info("Integrity error on commit: %s", e.orig)
        raise Conflict(message) from e
