"""Stored response access for assessment instances.

One row per (instance, question) holds the raw answer string; multi-valued
answers are stored in their ``;``-joined form exactly as the client sent them.
"""

from __future__ import annotations

import logging
import uuid
from typing import Dict, Iterable

from sqlalchemy import text as sql_text
from sqlalchemy.exc import IntegrityError

from assessments.db.base import get_engine
from assessments.logic.faults import NotFound, ValidationFault
from assessments.logic.repository_instances import get_instance
from assessments.logic.repository_questions import list_questions
from assessments.models.responses import InstanceQuestionsAndResponses, ResponseRecord

logger = logging.getLogger(__name__)


def load_responses(instance_id: str) -> Dict[str, str]:
    eng = get_engine()
    with eng.connect() as conn:
        rows = conn.execute(
            sql_text(
                "SELECT question_id, response_value FROM assessment_response WHERE instance_id = :iid"
            ),
            {"iid": str(instance_id)},
        ).fetchall()
    return {str(r[0]): str(r[1]) for r in rows if r[1] is not None}


def fetch_instance_questions_and_responses(instance_id: str) -> InstanceQuestionsAndResponses:
    instance = get_instance(instance_id)
    if instance is None:
        raise NotFound(f"assessment instance {instance_id} not found")
    questions = list_questions(instance.template_id)
    responses = load_responses(instance_id)
    logger.info(
        "instance_loaded instance_id=%s questions=%s responses=%s",
        instance_id,
        len(questions),
        len(responses),
    )
    return InstanceQuestionsAndResponses(questions=questions, responses=responses)


def save_responses(instance_id: str, records: Iterable[ResponseRecord]) -> int:
    """Upsert one row per (instance, question); empty raw values are skipped.

    Returns the number of rows written.
    """
    if get_instance(instance_id) is None:
        raise NotFound(f"assessment instance {instance_id} not found")
    eng = get_engine()
    written = 0
    try:
        with eng.begin() as conn:
            for rec in records:
                if rec.raw_value is None or rec.raw_value == "":
                    continue
                params = {
                    "iid": str(instance_id),
                    "qid": rec.question_id,
                    "val": rec.raw_value,
                    "rid": rec.record_id,
                    "obj": rec.object_api_name,
                }
                res = conn.execute(
                    sql_text(
                        """
                        UPDATE assessment_response
                        SET response_value = :val, record_id = :rid, object_api_name = :obj
                        WHERE instance_id = :iid AND question_id = :qid
                        """
                    ),
                    params,
                )
                if not res.rowcount:
                    params["resp"] = str(uuid.uuid4())
                    conn.execute(
                        sql_text(
                            """
                            INSERT INTO assessment_response
                                (response_id, instance_id, question_id, response_value, record_id, object_api_name)
                            VALUES (:resp, :iid, :qid, :val, :rid, :obj)
                            """
                        ),
                        params,
                    )
                written += 1
    except IntegrityError as exc:
        logger.error("save_responses rejected instance_id=%s", instance_id, exc_info=True)
        raise ValidationFault("Response references an unknown question.") from exc
    except Exception:
        logger.error("save_responses failed instance_id=%s", instance_id, exc_info=True)
        raise
    logger.info("responses_saved instance_id=%s count=%s", instance_id, written)
    return written


__all__ = ["load_responses", "fetch_instance_questions_and_responses", "save_responses"]
