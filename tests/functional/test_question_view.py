"""Render descriptors derived from the taxonomy and stored answers."""

from __future__ import annotations

from assessments.logic.question_view import build_question_view, preview_options, selected_default
from assessments.models.question_type import InputKind, QuestionType


def test_checkbox_view_marks_selected_options(question_factory) -> None:
    q = question_factory("q1", QuestionType.CHECKBOXES, options=["A", "B", "C"])
    view = build_question_view(q, "A;C")
    assert view["input_kind"] == InputKind.CHECKBOX_SET
    assert view["is_multi_valued"] is True
    assert view["value"] == ["A", "C"]
    assert [(o["label"], o["is_selected"]) for o in view["options"]] == [("A", True), ("B", False), ("C", True)]


def test_scalar_view(question_factory) -> None:
    q = question_factory("q1", QuestionType.DATE, required=True)
    view = build_question_view(q, "2024-05-01")
    assert view["input_type"] == "date"
    assert view["value"] == "2024-05-01"
    assert view["response_value"] == "2024-05-01"
    assert view["options"] == []
    assert view["is_required"] is True


def test_unknown_type_renders_as_single_line(question_factory) -> None:
    q = question_factory("q1", "Star Rating")
    view = build_question_view(q, None)
    assert view["input_kind"] == InputKind.SINGLE_LINE
    assert view["value"] is None


def test_preview_lists_active_options_by_identity(question_factory) -> None:
    q = question_factory("q1", QuestionType.RADIO_BUTTONS, options=["Yes", "No"], default="No")
    q.options[0].is_active = False
    assert preview_options(q) == [{"label": "No", "value": "q1-opt-2"}]
    assert selected_default(q) == "q1-opt-2"


def test_preview_is_empty_for_types_without_options(question_factory) -> None:
    q = question_factory("q1", QuestionType.NUMBER)
    assert preview_options(q) == []
    assert selected_default(q) == ""
