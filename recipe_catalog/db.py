"""Database engine, sessions and the write transaction scope.

The engine is created lazily from ``settings.database_url`` so importing the
package never opens a connection. Request handlers get a session via the
``get_db`` dependency; services wrap multi-statement writes in
``transaction()``.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import Engine, create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker, DeclarativeBase

from .errors import StorageError
from .settings import settings

logger = logging.getLogger("recipe_catalog.db")


class Base(DeclarativeBase):
    pass


_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def _engine_options(url: str) -> dict[str, Any]:
    options: dict[str, Any] = {"pool_pre_ping": True}
    if url.startswith("sqlite"):
        # Sessions are handed across FastAPI's threadpool
        options["connect_args"] = {"check_same_thread": False}
    return options


def init_engine(database_url: str | None = None) -> Engine:
    """(Re)create the engine and session factory, defaulting to settings.database_url."""
    global _engine, _session_factory
    url = database_url or settings.database_url
    _engine = create_engine(url, **_engine_options(url))
    _session_factory = sessionmaker(autocommit=False, autoflush=False, bind=_engine)
    logger.info(f"Database engine initialised for {_engine.url.render_as_string(hide_password=True)}")
    return _engine


def get_sessionmaker() -> sessionmaker[Session]:
    if _session_factory is None:
        init_engine()
    return _session_factory


def get_db():
    db = get_sessionmaker()()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """Run a multi-statement write as one unit.

    Commits when the block exits cleanly. Any exception rolls back;
    SQLAlchemy errors are re-raised as StorageError.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Transaction rolled back: {e}")
        raise StorageError(str(e)) from e
    except Exception:
        db.rollback()
        raise
