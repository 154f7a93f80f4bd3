"""SQLAlchemy engine singleton for the assessment backend.

SQLite is the default for local runs and tests; PostgreSQL is used in
production through ``DATABASE_URL``. Repositories issue SQLAlchemy Core
``text()`` statements against this Engine; no ORM models are defined.
"""

from __future__ import annotations

import logging
import os

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite+pysqlite:///:memory:"


def _db_url() -> str:
    return (
        os.getenv("TEST_DATABASE_URL")
        or os.getenv("DATABASE_URL")
        or DEFAULT_DATABASE_URL
    )


_ENGINE: Engine | None = None
_ENGINE_URL: str | None = None


def get_engine(url: str | None = None) -> Engine:
    """Return the process-wide Engine, rebuilding it when a different URL is given.

    Without ``url`` the current Engine is reused; the first call falls back
    to ``TEST_DATABASE_URL`` / ``DATABASE_URL``.

    In-memory SQLite uses a StaticPool so every connection sees the same
    database. SQLite connections enable foreign keys.
    """
    global _ENGINE, _ENGINE_URL
    resolved_url = url or _ENGINE_URL or _db_url()

    if _ENGINE is None or _ENGINE_URL != resolved_url:
        kwargs: dict = {"future": True, "pool_pre_ping": True}
        is_sqlite = resolved_url.startswith("sqlite")
        if is_sqlite and ":memory:" in resolved_url:
            kwargs.update({
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            })
        elif is_sqlite:
            kwargs["connect_args"] = {"check_same_thread": False}
        engine = create_engine(resolved_url, **kwargs)
        if is_sqlite:
            event.listen(engine, "connect", _sqlite_pragmas)
        if _ENGINE is not None:
            _ENGINE.dispose()
        _ENGINE = engine
        _ENGINE_URL = resolved_url
        logger.info("db_engine_created dialect=%s", engine.dialect.name)

    return _ENGINE


def _sqlite_pragmas(dbapi_connection, _record) -> None:  # type: ignore[no-untyped-def]
    cur = dbapi_connection.cursor()
    try:
        cur.execute("PRAGMA foreign_keys=ON")
    finally:
        cur.close()

