"""Assessment instance data access helpers."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import text as sql_text

from assessments.db.base import get_engine
from assessments.models.responses import AssessmentInstance

logger = logging.getLogger(__name__)

_COLUMNS = "instance_id, record_id, object_api_name, template_id, name, created_at"


def _row_to_instance(r) -> AssessmentInstance:  # type: ignore[no-untyped-def]
    return AssessmentInstance(
        instance_id=str(r[0]),
        record_id=str(r[1]),
        object_api_name=r[2],
        template_id=str(r[3]),
        name=r[4],
        created_at=r[5],
    )


def create_instance(
    *,
    record_id: str,
    object_api_name: Optional[str],
    template_id: str,
    name: Optional[str] = None,
) -> AssessmentInstance:
    instance_id = str(uuid.uuid4())
    created_at = datetime.now(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")
    eng = get_engine()
    try:
        with eng.begin() as conn:
            if name is None:
                row = conn.execute(
                    sql_text("SELECT COUNT(*) FROM assessment_instance WHERE record_id = :rid"),
                    {"rid": str(record_id)},
                ).fetchone()
                name = f"Assessment {(int(row[0]) if row else 0) + 1}"
            seq_row = conn.execute(sql_text("SELECT COALESCE(MAX(created_seq), 0) FROM assessment_instance")).fetchone()
            created_seq = (int(seq_row[0]) if seq_row and seq_row[0] is not None else 0) + 1
            conn.execute(
                sql_text(
                    f"""
                    INSERT INTO assessment_instance ({_COLUMNS}, created_seq)
                    VALUES (:iid, :rid, :obj, :tid, :name, :created, :seq)
                    """
                ),
                {
                    "iid": instance_id,
                    "rid": str(record_id),
                    "obj": object_api_name,
                    "tid": str(template_id),
                    "name": name,
                    "created": created_at,
                    "seq": created_seq,
                },
            )
    except Exception:
        logger.error("create_instance failed record_id=%s", record_id, exc_info=True)
        raise
    logger.info("instance_created instance_id=%s record_id=%s template_id=%s", instance_id, record_id, template_id)
    return AssessmentInstance(
        instance_id=instance_id,
        record_id=str(record_id),
        object_api_name=object_api_name,
        template_id=str(template_id),
        name=name,
        created_at=created_at,
    )


def get_instance(instance_id: str) -> Optional[AssessmentInstance]:
    eng = get_engine()
    with eng.connect() as conn:
        row = conn.execute(
            sql_text(f"SELECT {_COLUMNS} FROM assessment_instance WHERE instance_id = :iid"),
            {"iid": str(instance_id)},
        ).fetchone()
    return _row_to_instance(row) if row is not None else None


def list_instances(record_id: str, object_api_name: Optional[str] = None) -> List[AssessmentInstance]:
    """Return a record's instances, newest first."""
    sql = f"SELECT {_COLUMNS} FROM assessment_instance WHERE record_id = :rid"
    params = {"rid": str(record_id)}
    if object_api_name:
        sql += " AND object_api_name = :obj"
        params["obj"] = object_api_name
    sql += " ORDER BY created_seq DESC, created_at DESC"
    eng = get_engine()
    with eng.connect() as conn:
        rows = conn.execute(sql_text(sql), params).fetchall()
    return [_row_to_instance(r) for r in rows]


__all__ = ["create_instance", "get_instance", "list_instances"]
