"""Context managers for database sessions outside the request cycle and for storage failures."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db import SessionLocal
from app.exceptions import StorageError
from app.infra.logging_config import get_logger

logger = get_logger("db")


@contextmanager
def db_session() -> Iterator[Session]:
    """Yield a session, rolling back on error and always closing it."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def storage_errors(db: Session, action: str) -> Iterator[None]:
    """Roll back and re-raise any SQLAlchemyError in the block as StorageError."""
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Failed to %s: %s", action, e)
        raise StorageError(str(e)) from e
