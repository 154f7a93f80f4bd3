"""Template lookup and binding helpers.

Keeps the routes free of inline SQL for resolving which assessment template a
record uses.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy import text as sql_text

from assessments.db.base import get_engine

logger = logging.getLogger(__name__)


def fetch_template_id(record_id: str, object_api_name: str, field_api_name: str) -> Optional[str]:
    """Return the template bound to a record through ``field_api_name``, or None."""
    eng = get_engine()
    with eng.connect() as conn:
        row = conn.execute(
            sql_text(
                """
                SELECT template_id FROM record_template_binding
                WHERE record_id = :rid AND object_api_name = :obj AND field_api_name = :fld
                """
            ),
            {"rid": str(record_id), "obj": str(object_api_name), "fld": str(field_api_name)},
        ).fetchone()
    template_id = str(row[0]) if row and row[0] is not None else None
    logger.info(
        "template_lookup record_id=%s object=%s field=%s template_id=%s",
        record_id,
        object_api_name,
        field_api_name,
        template_id,
    )
    return template_id


def template_exists(template_id: str) -> bool:
    eng = get_engine()
    with eng.connect() as conn:
        row = conn.execute(
            sql_text("SELECT 1 FROM assessment_template WHERE template_id = :tid"),
            {"tid": str(template_id)},
        ).fetchone()
    return row is not None


def create_template(name: str, template_id: Optional[str] = None) -> str:
    new_id = template_id or str(uuid.uuid4())
    eng = get_engine()
    try:
        with eng.begin() as conn:
            conn.execute(
                sql_text("INSERT INTO assessment_template (template_id, name) VALUES (:tid, :name)"),
                {"tid": new_id, "name": name},
            )
    except Exception:
        logger.error("create_template failed template_id=%s", new_id, exc_info=True)
        raise
    return new_id


def bind_record_template(record_id: str, object_api_name: str, field_api_name: str, template_id: str) -> None:
    """Associate a record with a template, replacing any previous binding."""
    eng = get_engine()
    params = {
        "rid": str(record_id),
        "obj": str(object_api_name),
        "fld": str(field_api_name),
        "tid": str(template_id),
    }
    try:
        with eng.begin() as conn:
            conn.execute(
                sql_text(
                    """
                    DELETE FROM record_template_binding
                    WHERE record_id = :rid AND object_api_name = :obj AND field_api_name = :fld
                    """
                ),
                params,
            )
            conn.execute(
                sql_text(
                    """
                    INSERT INTO record_template_binding (object_api_name, field_api_name, record_id, template_id)
                    VALUES (:obj, :fld, :rid, :tid)
                    """
                ),
                params,
            )
    except Exception:
        logger.error(
            "bind_record_template failed record_id=%s template_id=%s",
            record_id,
            template_id,
            exc_info=True,
        )
        raise


__all__ = [
    "fetch_template_id",
    "template_exists",
    "create_template",
    "bind_record_template",
]
