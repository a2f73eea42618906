"""
SQLAlchemy repository for the LifeHub key/value store.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import SETTINGS
from .models import Base, StoreEntry

_engine: Engine | None = None
_session: sessionmaker[Session] | None = None


def _prepare_url(url: str) -> tuple[str, dict[str, Any]]:
    """Return sanitized DB URL and engine keyword arguments.

    Extracts common SSL query parameters and passes them as ``connect_args``
    for ``psycopg``; ``ssl=false`` becomes ``sslmode=disable``. In-memory
    SQLite gets a single shared connection so every session sees one database.
    """

    url_obj = make_url(url)
    query = dict(url_obj.query)
    connect_args: dict[str, object] = {}
    engine_kwargs: dict[str, Any] = {}

    if url_obj.drivername.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        if url_obj.database in {":memory:", "", None}:
            engine_kwargs["poolclass"] = StaticPool
    else:
        sslmode = query.pop("sslmode", None)
        ssl_val = query.pop("ssl", None)
        if ssl_val is not None:
            disabled = str(ssl_val).lower() in {"0", "false", "off", "no"}
            sslmode = "disable" if disabled else "require"
        if sslmode:
            connect_args["sslmode"] = sslmode
        engine_kwargs.update(pool_pre_ping=True, pool_recycle=3600, pool_size=5, max_overflow=5)

    engine_kwargs["connect_args"] = connect_args
    url_obj = url_obj.set(query=query)
    return url_obj.render_as_string(hide_password=False), engine_kwargs


def init_db(url: str | None = None) -> None:
    """
    Initialize the database engine and sessionmaker, and create tables if needed.
    """
    global _engine, _session
    if _engine:
        return
    url = url or SETTINGS.DATABASE_URL
    if not url:
        logging.error("DATABASE_URL is required for DB initialization.")
        raise RuntimeError("DATABASE_URL is required")
    db_url, engine_kwargs = _prepare_url(url)
    _engine = create_engine(db_url, echo=False, **engine_kwargs)
    _session = sessionmaker(_engine, expire_on_commit=False)
    Base.metadata.create_all(_engine)
    logging.info("Store initialized at %s", make_url(db_url).render_as_string(hide_password=True))


def get_session() -> sessionmaker[Session]:
    """
    Get the sessionmaker. Raises if DB is not initialized.
    """
    if not _session:
        raise RuntimeError("DB not initialized; call init_db() first")
    return _session


def close_db() -> None:
    """Dispose of the database engine and reset session state."""

    global _engine, _session
    if _engine:
        _engine.dispose()
    _engine = None
    _session = None


def load_data(key: str, fallback: Any) -> Any:
    """Return the stored value for ``key``, or ``fallback`` when absent."""
    sessmaker = get_session()
    with sessmaker() as s:
        entry = s.get(StoreEntry, key)
        if entry is None or entry.value is None:
            return fallback
        return entry.value


def save_data(entries: Mapping[str, Any]) -> None:
    """Upsert every key in ``entries`` in a single transaction."""
    sessmaker = get_session()
    now = datetime.now(UTC)
    with sessmaker() as s, s.begin():
        for key, value in entries.items():
            entry = s.get(StoreEntry, key)
            if entry is None:
                s.add(StoreEntry(key=key, value=value, updated_at=now))
            else:
                entry.value = value
                entry.updated_at = now
    logging.debug("Saved store keys: %s", ", ".join(entries))
