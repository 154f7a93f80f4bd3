"""Encoding of UI-level answer values into the stored string form.

Every answer is persisted as one string. Scalar types store the value
as-is. Multi-valued types store the ordered selection joined with ``;``;
option values must not contain the separator themselves (not checked here).
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Union

from assessments.models.question_type import is_multi_valued

SEPARATOR = ";"

AnswerValue = Union[str, List[str], None]


def encode(question_type: Optional[str], value: object) -> str:
    """Return the transportable string for ``value``.

    - Multi-valued types: ``value`` is an ordered sequence of option values;
      an empty or missing sequence encodes to ``""``.
    - Other types: the value itself, ``""`` when absent.
    """
    if is_multi_valued(question_type):
        if value is None:
            return ""
        if isinstance(value, str):
            # Already in stored form
            return value
        return SEPARATOR.join(str(v) for v in value)  # type: ignore[union-attr]
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def decode(question_type: Optional[str], raw: Optional[str]) -> AnswerValue:
    """Inverse of ``encode``.

    Multi-valued types decode to a list (empty for empty/absent raw) in
    stored order without de-duplication. Scalar types pass the raw value
    through; absent stays ``None`` so it remains distinguishable from ``""``.
    """
    if is_multi_valued(question_type):
        return split_selection(raw)
    return raw


def split_selection(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return raw.split(SEPARATOR)


def join_selection(values: Iterable[str]) -> str:
    return SEPARATOR.join(values)


def is_empty_answer(question_type: Optional[str], raw: Optional[str]) -> bool:
    """True when ``raw`` decodes to no answer for ``question_type``."""
    decoded = decode(question_type, raw)
    if isinstance(decoded, list):
        return len(decoded) == 0
    return decoded is None or decoded == ""


__all__ = [
    "SEPARATOR",
    "AnswerValue",
    "encode",
    "decode",
    "split_selection",
    "join_selection",
    "is_empty_answer",
]
