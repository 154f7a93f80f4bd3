"""Immutable map of question id -> raw stored answer.

Each update returns a new ``ResponseStore``; the receiver is never changed,
so a store handed to a validator or a save call cannot shift underneath it.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, Optional

from assessments.logic.response_codec import join_selection, split_selection


class ResponseStore(Mapping):
    __slots__ = ("_data",)

    def __init__(self, initial: Optional[Mapping] = None) -> None:
        data: Dict[str, str] = {}
        for qid, raw in (initial or {}).items():
            if raw is None:
                continue
            data[str(qid)] = str(raw)
        self._data = MappingProxyType(data)

    # Mapping protocol
    def __getitem__(self, qid: str) -> str:
        return self._data[qid]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ResponseStore):
            return dict(self._data) == dict(other._data)
        if isinstance(other, Mapping):
            return dict(self._data) == dict(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(frozenset(self._data.items()))

    def __repr__(self) -> str:
        return f"ResponseStore({dict(self._data)!r})"

    def get(self, qid: str, default: Optional[str] = None) -> Optional[str]:  # type: ignore[override]
        return self._data.get(qid, default)

    def as_dict(self) -> Dict[str, str]:
        return dict(self._data)

    def _with(self, qid: str, raw: str) -> "ResponseStore":
        data = dict(self._data)
        data[str(qid)] = raw
        return ResponseStore(data)

    def set_scalar(self, qid: str, value: Optional[str]) -> "ResponseStore":
        """Overwrite the raw value for ``qid``; ``None`` stores the empty string."""
        return self._with(qid, "" if value is None else str(value))

    def toggle_set_member(self, qid: str, option_value: str, checked: bool) -> "ResponseStore":
        """Add or remove one member of a checkbox-set answer.

        Adding an already-present member and removing an absent one are
        no-ops, so on-then-off for a previously absent member restores the
        prior encoded value.
        """
        selected = split_selection(self._data.get(qid))
        if checked:
            if option_value not in selected:
                selected.append(option_value)
        else:
            selected = [v for v in selected if v != option_value]
        return self._with(qid, join_selection(selected))

    def replace_ordered_selection(self, qid: str, values: Iterable[str]) -> "ResponseStore":
        """Store the widget's ordered selection exactly as given (no dedup)."""
        return self._with(qid, join_selection(list(values)))


__all__ = ["ResponseStore"]
