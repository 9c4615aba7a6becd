"""
SQLAlchemy plumbing for the relational world dataset.

Provides the shared declarative base, engine/session factories and the
scoped unit-of-work used by every relational pass.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .exceptions import DataAccessError

logger = logging.getLogger(__name__)

Base = declarative_base()


def make_engine(database_url: str) -> Engine:
    """Create an engine for the given database URL."""
    engine = create_engine(database_url, pool_pre_ping=True)
    logger.info(f"Created engine for {engine.url.render_as_string(hide_password=True)}")
    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    """
    Build the session factory used by the loader.

    Objects stay populated after commit so cities loaded in one scope can be
    transformed after the scope has closed.
    """
    return sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


@contextmanager
def session_scope(session_factory: sessionmaker) -> Iterator[Session]:
    """
    Context manager for one relational unit of work.

    Commits on success, rolls back on any exception and always closes the
    session. Driver errors are re-raised as DataAccessError.
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Database error: {e}")
        raise DataAccessError(f"Relational store error: {e}") from e
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
