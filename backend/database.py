"""
Database engine, session factory and declarative base.

The engine is built once at import time from DATABASE_URL and handed to
request handlers through the get_db dependency, one Session per request.
"""

import logging
import os
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from errors import InternalError

logger = logging.getLogger(__name__)

DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./team_tasks.db")

# SQLite connections are shared across FastAPI's threadpool workers
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency yielding a database session for the current request.

    The session is always closed when the request finishes.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def commit_or_rollback(db: Session) -> None:
    """
    Commit the current transaction, rolling back and raising InternalError on failure.

    Raises:
        InternalError: 500 if the database rejects the commit
    """
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database commit failed: {e.__class__.__name__}: {e}")
        raise InternalError("Database operation failed")
