"""Question and option repository helpers for authoring.

Encapsulates DB reads/writes used by the authoring and answering routes so
the HTTP layer stays free of SQL. Failures are logged at ERROR with
``exc_info`` and re-raised for the route to map.
"""

from __future__ import annotations

import logging
import uuid
from typing import Dict, Iterable, List, Optional

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import IntegrityError

from assessments.db.base import get_engine
from assessments.logic.faults import NotFound, ValidationFault
from assessments.models.question_type import carries_options
from assessments.models.questions import (
    OptionDefinition,
    QuestionDefinition,
    SavedQuestion,
)

logger = logging.getLogger(__name__)


def _load_options(conn: Connection, question_ids: List[str]) -> Dict[str, List[OptionDefinition]]:
    by_question: Dict[str, List[OptionDefinition]] = {qid: [] for qid in question_ids}
    if not question_ids:
        return by_question
    placeholders = ", ".join(f":q{i}" for i in range(len(question_ids)))
    params = {f"q{i}": qid for i, qid in enumerate(question_ids)}
    rows = conn.execute(
        sql_text(
            f"""
            SELECT option_id, question_id, value, is_active, is_default, sequence_number
            FROM question_option
            WHERE question_id IN ({placeholders})
            ORDER BY question_id ASC, sequence_number ASC, option_id ASC
            """
        ),
        params,
    ).fetchall()
    for r in rows:
        by_question.setdefault(str(r[1]), []).append(
            OptionDefinition(
                option_id=str(r[0]),
                value=str(r[2]) if r[2] is not None else "",
                is_active=bool(r[3]),
                is_default=bool(r[4]),
                sequence_number=int(r[5]) if r[5] is not None else 1,
            )
        )
    return by_question


def _row_to_question(r, options: List[OptionDefinition]) -> QuestionDefinition:  # type: ignore[no-untyped-def]
    return QuestionDefinition(
        question_id=str(r[0]),
        template_id=str(r[1]),
        question_text=str(r[2]) if r[2] is not None else "",
        question_type=str(r[3]) if r[3] is not None else "",
        is_required=bool(r[4]),
        sequence_number=int(r[5]) if r[5] is not None else 1,
        options=options,
    )


def list_questions(template_id: str) -> List[QuestionDefinition]:
    """Return a template's questions with nested options, in sequence order."""
    eng = get_engine()
    with eng.connect() as conn:
        rows = conn.execute(
            sql_text(
                """
                SELECT question_id, template_id, question_text, question_type, is_required, sequence_number
                FROM question
                WHERE template_id = :tid
                ORDER BY sequence_number ASC, question_id ASC
                """
            ),
            {"tid": str(template_id)},
        ).fetchall()
        ids = [str(r[0]) for r in rows]
        options = _load_options(conn, ids)
    return [_row_to_question(r, options.get(str(r[0]), [])) for r in rows]


def _next_sequence(conn: Connection, template_id: str) -> int:
    row = conn.execute(
        sql_text("SELECT COALESCE(MAX(sequence_number), 0) FROM question WHERE template_id = :tid"),
        {"tid": template_id},
    ).fetchone()
    return (int(row[0]) if row and row[0] is not None else 0) + 1


def _sync_options(conn: Connection, question_id: str, options: Optional[Iterable[OptionDefinition]]) -> List[str]:
    """Make the stored options of ``question_id`` match ``options``.

    ``None`` removes every option. Options with an id are updated, options
    without one are inserted, and stored options absent from the list are
    deleted.
    """
    existing = {
        str(r[0])
        for r in conn.execute(
            sql_text("SELECT option_id FROM question_option WHERE question_id = :qid"),
            {"qid": question_id},
        ).fetchall()
    }
    kept: List[str] = []
    for idx, opt in enumerate(options or []):
        # Options sent without a sequence number keep their list position
        seq = int(opt.sequence_number) if "sequence_number" in opt.model_fields_set else idx + 1
        params = {
            "qid": question_id,
            "val": opt.value or "",
            "act": bool(opt.is_active),
            "dflt": bool(opt.is_default),
            "seq": seq,
        }
        if opt.option_id and opt.option_id in existing:
            params["oid"] = opt.option_id
            conn.execute(
                sql_text(
                    """
                    UPDATE question_option
                    SET value = :val, is_active = :act, is_default = :dflt, sequence_number = :seq
                    WHERE option_id = :oid AND question_id = :qid
                    """
                ),
                params,
            )
            kept.append(opt.option_id)
        else:
            params["oid"] = str(uuid.uuid4())
            conn.execute(
                sql_text(
                    """
                    INSERT INTO question_option (option_id, question_id, value, is_active, is_default, sequence_number)
                    VALUES (:oid, :qid, :val, :act, :dflt, :seq)
                    """
                ),
                params,
            )
            kept.append(params["oid"])
    for stale in sorted(existing - set(kept)):
        conn.execute(
            sql_text("DELETE FROM question_option WHERE option_id = :oid"),
            {"oid": stale},
        )
    return kept


def save_question_with_options(
    question: QuestionDefinition,
    options: Optional[List[OptionDefinition]],
) -> SavedQuestion:
    """Insert or update one question aggregate in a single transaction."""
    if not (question.question_text or "").strip() or not question.question_type:
        raise ValidationFault("Please complete all required fields.")
    if not question.template_id:
        raise ValidationFault("template_id is required")
    if not carries_options(question.question_type):
        options = None
    defaults = [opt for opt in (options or []) if opt.is_default]
    if len(defaults) > 1:
        raise ValidationFault("At most one option can be the default.")

    eng = get_engine()
    try:
        with eng.begin() as conn:
            qid = question.question_id
            if qid:
                result = conn.execute(
                    sql_text(
                        """
                        UPDATE question
                        SET question_text = :txt, question_type = :typ, is_required = :req, sequence_number = COALESCE(:seq, sequence_number)
                        WHERE question_id = :qid
                        """
                    ),
                    {
                        "txt": question.question_text,
                        "typ": question.question_type,
                        "req": bool(question.is_required),
                        "seq": int(question.sequence_number) if "sequence_number" in question.model_fields_set else None,
                        "qid": qid,
                    },
                )
                if result.rowcount == 0:
                    raise NotFound(f"question {qid} not found")
            else:
                qid = str(uuid.uuid4())
                # A new question without an explicit position goes last
                if "sequence_number" in question.model_fields_set:
                    seq = int(question.sequence_number)
                else:
                    seq = _next_sequence(conn, question.template_id)
                conn.execute(
                    sql_text(
                        """
                        INSERT INTO question (question_id, template_id, question_text, question_type, is_required, sequence_number)
                        VALUES (:qid, :tid, :txt, :typ, :req, :seq)
                        """
                    ),
                    {
                        "qid": qid,
                        "tid": question.template_id,
                        "txt": question.question_text,
                        "typ": question.question_type,
                        "req": bool(question.is_required),
                        "seq": seq,
                    },
                )
            option_ids = _sync_options(conn, qid, options)
    except (ValidationFault, NotFound):
        raise
    except IntegrityError as exc:
        logger.error("save_question_with_options rejected template_id=%s", question.template_id, exc_info=True)
        raise ValidationFault("Question references an unknown template.") from exc
    except Exception:
        logger.error("save_question_with_options failed qid=%s", question.question_id, exc_info=True)
        raise
    logger.info("question_saved question_id=%s options=%s", qid, len(option_ids))
    return SavedQuestion(question_id=qid, option_ids=option_ids)


def update_question_sequences(questions: Iterable[QuestionDefinition]) -> int:
    """Persist each question's sequence number; returns the number of rows written."""
    eng = get_engine()
    written = 0
    try:
        with eng.begin() as conn:
            for q in questions:
                if not q.question_id:
                    continue
                res = conn.execute(
                    sql_text("UPDATE question SET sequence_number = :seq WHERE question_id = :qid"),
                    {"seq": int(q.sequence_number), "qid": q.question_id},
                )
                written += int(res.rowcount or 0)
    except Exception:
        logger.error("update_question_sequences failed", exc_info=True)
        raise
    logger.info("question_sequences_updated count=%s", written)
    return written


def delete_question(question_id: str) -> None:
    """Delete a question together with its options and stored responses."""
    eng = get_engine()
    try:
        with eng.begin() as conn:
            params = {"qid": str(question_id)}
            conn.execute(sql_text("DELETE FROM assessment_response WHERE question_id = :qid"), params)
            conn.execute(sql_text("DELETE FROM question_option WHERE question_id = :qid"), params)
            res = conn.execute(sql_text("DELETE FROM question WHERE question_id = :qid"), params)
            if not res.rowcount:
                raise NotFound(f"question {question_id} not found")
    except NotFound:
        raise
    except Exception:
        logger.error("delete_question failed qid=%s", question_id, exc_info=True)
        raise
    logger.info("question_deleted question_id=%s", question_id)


__all__ = [
    "list_questions",
    "save_question_with_options",
    "update_question_sequences",
    "delete_question",
]
