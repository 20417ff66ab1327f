from __future__ import annotations

import logging
import threading
from typing import Optional

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from sentrydash.core.config import settings

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None
_engine_lock = threading.Lock()


def _build_engine(url: str) -> Engine:
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
    return create_engine(url, connect_args=connect_args)


def get_engine() -> Engine:
    """Return the process-wide engine, creating it on first use."""
    global _engine
    if _engine is None:
        with _engine_lock:
            if _engine is None:
                _engine = _build_engine(settings.DATABASE_URL)
                logger.info(f"Database engine created for {_engine.url.render_as_string(hide_password=True)}")
    return _engine


def dispose_engine() -> None:
    """Close pooled connections and forget the engine (used by tests and shutdown)."""
    global _engine
    with _engine_lock:
        if _engine is not None:
            _engine.dispose()
            _engine = None


def init_db(engine: Optional[Engine] = None) -> None:
    """Create database tables in environments without migrations."""
    # Register tables on the metadata before create_all.
    from sentrydash import models  # noqa: F401

    SQLModel.metadata.create_all(bind=engine or get_engine())
