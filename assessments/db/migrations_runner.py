"""Lightweight SQL migrations runner.

Applies ``.sql`` files in lexical order from the ``migrations/`` directory and
records each applied filename in a ``schema_migrations`` table of the target
database, so a fresh database (e.g. a per-test SQLite file) is always
migrated from scratch. Production deployments may use Alembic instead.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable
import logging

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection, Engine

logger = logging.getLogger(__name__)

DEFAULT_MIGRATIONS_DIR = Path(__file__).resolve().parents[2] / "migrations"

_JOURNAL_DDL = (
    "CREATE TABLE IF NOT EXISTS schema_migrations ("
    " filename VARCHAR(255) PRIMARY KEY,"
    " applied_at VARCHAR(32) NOT NULL)"
)


def _iter_sql_files(root: Path) -> Iterable[Path]:
    for p in sorted(root.glob("*.sql")):
        if "rollback" in p.name.lower():
            continue
        yield p


def _exec_sql_compat(conn: Connection, sql: str) -> None:
    """Execute a multi-statement SQL file.

    pysqlite refuses several statements in one ``execute()``, so for SQLite
    split on ``;`` and run the statements one at a time. Other dialects get
    the script as-is.
    """
    name = (getattr(conn.dialect, "name", "") or "").lower()
    if "sqlite" not in name:
        conn.exec_driver_sql(sql)
        return
    for stmt in sql.split(";"):
        lines = [ln for ln in stmt.splitlines() if not ln.strip().startswith("--")]
        s = "\n".join(lines).strip()
        if not s or s.upper() in {"BEGIN", "COMMIT", "END"}:
            continue
        conn.exec_driver_sql(s)


def applied_migrations(engine: Engine) -> set[str]:
    with engine.begin() as conn:
        conn.exec_driver_sql(_JOURNAL_DDL)
        rows = conn.execute(sql_text("SELECT filename FROM schema_migrations")).fetchall()
    return {str(r[0]) for r in rows}


def apply_migrations(engine: Engine, migrations_dir: str | os.PathLike[str] | None = None) -> list[str]:
    """Apply pending migrations; return the filenames applied in this run."""
    root = Path(migrations_dir) if migrations_dir is not None else DEFAULT_MIGRATIONS_DIR
    if not root.exists():
        logger.warning("migrations_dir_missing path=%s", root)
        return []

    done = applied_migrations(engine)
    applied_now: list[str] = []
    for sql_path in _iter_sql_files(root):
        fname = sql_path.name
        if fname in done:
            continue
        sql = sql_path.read_text(encoding="utf-8")
        if not sql.strip():
            continue
        try:
            with engine.begin() as conn:
                _exec_sql_compat(conn, sql)
                conn.execute(
                    sql_text("INSERT INTO schema_migrations (filename, applied_at) VALUES (:f, :t)"),
                    {
                        "f": fname,
                        "t": datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z"),
                    },
                )
        except Exception:
            logger.error("migration_failed file=%s", fname, exc_info=True)
            raise
        applied_now.append(fname)
        logger.info("migration_applied file=%s", fname)
    return applied_now


__all__ = ["apply_migrations", "applied_migrations", "DEFAULT_MIGRATIONS_DIR"]
