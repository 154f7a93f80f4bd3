"""Submission gate for an answering session.

A submission is allowed only when every required question has a non-empty
decoded answer. The verdict is a single boolean; per-field validity display
belongs to the presentation layer.
"""

from __future__ import annotations

from typing import Iterable, List, Mapping, Optional
import logging

from assessments.logic.response_codec import is_empty_answer
from assessments.models.questions import QuestionDefinition

logger = logging.getLogger(__name__)


def unanswered_required(
    questions: Iterable[QuestionDefinition],
    responses: Mapping[str, Optional[str]],
) -> List[str]:
    """Return ids of required questions whose answer decodes as empty."""
    missing: List[str] = []
    for q in questions:
        if not q.is_required:
            continue
        raw = responses.get(q.question_id or "")
        if is_empty_answer(q.question_type, raw):
            missing.append(str(q.question_id))
    return missing


def is_submittable(
    questions: Iterable[QuestionDefinition],
    responses: Mapping[str, Optional[str]],
) -> bool:
    missing = unanswered_required(questions, responses)
    if missing:
        logger.info("submission_blocked missing_required=%s", missing)
        return False
    return True


__all__ = ["unanswered_required", "is_submittable"]
