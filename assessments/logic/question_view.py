"""Render descriptors for questions.

Derives everything a renderer needs from the taxonomy and the stored raw
answer, so templates never branch on question type strings themselves.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from assessments.logic.response_codec import decode, split_selection
from assessments.models.question_type import classify
from assessments.models.questions import QuestionDefinition


def build_question_view(question: QuestionDefinition, raw: Optional[str]) -> Dict[str, Any]:
    """Return the answering-form descriptor for one question.

    Option descriptors use the option value as both label and value and
    mark ``is_selected`` when the value is part of the stored selection.
    """
    traits = classify(question.question_type)
    selected = split_selection(raw)
    options: List[Dict[str, Any]] = []
    if traits.carries_options:
        options = [
            {"label": opt.value, "value": opt.value, "is_selected": opt.value in selected}
            for opt in question.options
        ]
    return {
        "question_id": question.question_id,
        "question_text": question.question_text,
        "question_type": question.question_type,
        "is_required": question.is_required,
        "sequence_number": question.sequence_number,
        "input_kind": traits.input_kind,
        "input_type": traits.html_input_type,
        "carries_options": traits.carries_options,
        "is_multi_valued": traits.is_multi_valued,
        "response_value": raw,
        "value": decode(question.question_type, raw),
        "options": options,
    }


def preview_options(question: QuestionDefinition) -> List[Dict[str, str]]:
    """Active options for the authoring preview, keyed by option identity."""
    if not classify(question.question_type).carries_options:
        return []
    return [{"label": opt.value, "value": opt.key} for opt in question.options if opt.is_active]


def selected_default(question: QuestionDefinition) -> str:
    default = question.default_option()
    return default.key if default is not None else ""


__all__ = ["build_question_view", "preview_options", "selected_default"]
