"""Question type taxonomy.

Single authoritative table mapping each question type to its input kind and
answer shape. Builder, renderer, codec and validator all consult
``classify()``; no other module compares question type strings directly.

Unknown type strings classify as single-line text with no options rather
than failing, so a template authored against a newer type list still renders.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional


class QuestionType:
    SINGLE_LINE_TEXT = "Single Line Text"
    PARAGRAPH_TEXT = "Paragraph Text"
    PICKLIST = "Picklist (Single Select)"
    MULTI_SELECT_PICKLIST = "Multi-Select Picklist"
    CHECKBOXES = "Checkboxes"
    RADIO_BUTTONS = "Radio Buttons"
    DATE = "Date"
    NUMBER = "Number"


class InputKind:
    SINGLE_LINE = "single-line"
    MULTI_LINE = "multi-line"
    SINGLE_SELECT = "single-select"
    MULTI_SELECT = "multi-select"
    CHECKBOX_SET = "checkbox-set"
    RADIO_SET = "radio-set"
    DATE = "date"
    NUMBER = "number"


@dataclass(frozen=True)
class TypeTraits:
    input_kind: str
    carries_options: bool
    is_multi_valued: bool
    # HTML input type used by plain <input> renderers
    html_input_type: str = "text"


_TAXONOMY: Dict[str, TypeTraits] = {
    QuestionType.SINGLE_LINE_TEXT: TypeTraits(InputKind.SINGLE_LINE, False, False),
    QuestionType.PARAGRAPH_TEXT: TypeTraits(InputKind.MULTI_LINE, False, False),
    QuestionType.PICKLIST: TypeTraits(InputKind.SINGLE_SELECT, True, False),
    QuestionType.MULTI_SELECT_PICKLIST: TypeTraits(InputKind.MULTI_SELECT, True, True),
    QuestionType.CHECKBOXES: TypeTraits(InputKind.CHECKBOX_SET, True, True),
    QuestionType.RADIO_BUTTONS: TypeTraits(InputKind.RADIO_SET, True, False),
    QuestionType.DATE: TypeTraits(InputKind.DATE, False, False, "date"),
    QuestionType.NUMBER: TypeTraits(InputKind.NUMBER, False, False, "number"),
}

FALLBACK_TRAITS = TypeTraits(InputKind.SINGLE_LINE, False, False)

# Authoring picklist, in display order
QUESTION_TYPE_CHOICES = tuple(_TAXONOMY.keys())


def classify(question_type: Optional[str]) -> TypeTraits:
    """Return the traits for ``question_type``; unknown or empty types fall back."""
    if not question_type:
        return FALLBACK_TRAITS
    return _TAXONOMY.get(str(question_type), FALLBACK_TRAITS)


def is_known_type(question_type: Optional[str]) -> bool:
    return bool(question_type) and str(question_type) in _TAXONOMY


def carries_options(question_type: Optional[str]) -> bool:
    return classify(question_type).carries_options


def is_multi_valued(question_type: Optional[str]) -> bool:
    return classify(question_type).is_multi_valued


def is_ordered_selection(question_type: Optional[str]) -> bool:
    """True for types whose widget reports the full ordered selection at once."""
    return classify(question_type).input_kind == InputKind.MULTI_SELECT


def is_toggle_selection(question_type: Optional[str]) -> bool:
    """True for types whose widget reports one member toggled at a time."""
    return classify(question_type).input_kind == InputKind.CHECKBOX_SET


__all__ = [
    "QuestionType",
    "InputKind",
    "TypeTraits",
    "FALLBACK_TRAITS",
    "QUESTION_TYPE_CHOICES",
    "classify",
    "is_known_type",
    "carries_options",
    "is_multi_valued",
    "is_ordered_selection",
    "is_toggle_selection",
]
