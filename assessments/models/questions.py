"""Pydantic models for question aggregates.

A question aggregate is one ``QuestionDefinition`` plus its ordered
``OptionDefinition`` list. Options carry an explicit identity: persisted
options are keyed by their durable ``option_id``; options created in an
editing session are keyed by a session-local draft number that is never
reused within that session.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Union

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class PersistedId:
    option_id: str

    @property
    def key(self) -> str:
        return self.option_id


@dataclass(frozen=True)
class DraftId:
    number: int

    @property
    def key(self) -> str:
        return f"draft-{self.number}"


OptionIdentity = Union[PersistedId, DraftId]


class OptionDefinition(BaseModel):
    option_id: Optional[str] = None
    value: str = ""
    is_active: bool = True
    is_default: bool = False
    sequence_number: int = Field(default=1, ge=1)
    # Session-local identity for unsaved options; never sent over the wire
    draft_id: Optional[int] = Field(default=None, exclude=True)

    @property
    def identity(self) -> Optional[OptionIdentity]:
        if self.option_id:
            return PersistedId(self.option_id)
        if self.draft_id is not None:
            return DraftId(self.draft_id)
        return None

    @property
    def key(self) -> str:
        ident = self.identity
        return ident.key if ident is not None else ""


class QuestionDefinition(BaseModel):
    question_id: Optional[str] = None
    template_id: Optional[str] = None
    question_text: str = ""
    question_type: str = ""
    is_required: bool = False
    sequence_number: int = Field(default=1, ge=1)
    options: List[OptionDefinition] = Field(default_factory=list)

    @property
    def is_persisted(self) -> bool:
        return bool(self.question_id)

    def default_option(self) -> Optional[OptionDefinition]:
        for opt in self.options:
            if opt.is_default:
                return opt
        return None


class SaveQuestionRequest(BaseModel):
    """Body of ``POST /questions``.

    ``options`` is null when the question's type carries no options; the
    nested ``question.options`` list is ignored in favour of this field.
    """

    question: QuestionDefinition
    options: Optional[List[OptionDefinition]] = None


class QuestionSequencesRequest(BaseModel):
    questions: List[QuestionDefinition]


class TemplateLookup(BaseModel):
    template_id: Optional[str] = None


class SavedQuestion(BaseModel):
    question_id: str
    option_ids: List[str] = Field(default_factory=list)


__all__ = [
    "PersistedId",
    "DraftId",
    "OptionIdentity",
    "OptionDefinition",
    "QuestionDefinition",
    "SaveQuestionRequest",
    "QuestionSequencesRequest",
    "TemplateLookup",
    "SavedQuestion",
]
