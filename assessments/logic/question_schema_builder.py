"""Editing of one question-plus-options aggregate.

The builder owns a deep copy of the aggregate for the duration of one edit
session; the original passed in is never touched. Options created here get a
draft identity from a per-builder counter, so two options added in quick
succession can never collide.

Invariants maintained on the working copy:
- at most one option has ``is_default`` set;
- a question whose type carries no options has no options and no default.
"""

from __future__ import annotations

from itertools import count
from typing import Awaitable, Callable, Dict, List, Optional, Union
import logging

from assessments.logic.faults import ValidationFault
from assessments.logic.question_view import selected_default
from assessments.models.question_type import carries_options
from assessments.models.questions import (
    OptionDefinition,
    OptionIdentity,
    QuestionDefinition,
    SavedQuestion,
    SaveQuestionRequest,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "Please complete all required fields."

SaveCallable = Callable[[SaveQuestionRequest], Awaitable[SavedQuestion]]
IdentityRef = Union[OptionIdentity, str]


class QuestionSchemaBuilder:
    def __init__(
        self,
        question: Optional[QuestionDefinition] = None,
        *,
        template_id: Optional[str] = None,
        sequence_number: int = 1,
    ) -> None:
        if question is None:
            question = QuestionDefinition(
                template_id=template_id,
                question_text="",
                question_type="",
                is_required=False,
                sequence_number=max(1, int(sequence_number)),
                options=[],
            )
        self._draft_counter = count(1)
        self.question = question.model_copy(deep=True)
        if template_id and not self.question.template_id:
            self.question.template_id = template_id
        for opt in self.question.options:
            # Loaded options without a durable id still need a stable key
            if not opt.option_id and opt.draft_id is None:
                opt.draft_id = next(self._draft_counter)
        self.saved = False
        self.default_choices: List[Dict[str, str]] = []
        self.selected_default = ""
        self._refresh_default_choices()

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def is_option_type(self) -> bool:
        return carries_options(self.question.question_type)

    @property
    def options(self) -> List[OptionDefinition]:
        return self.question.options

    def _refresh_default_choices(self) -> None:
        self.default_choices = [{"label": opt.value, "value": opt.key} for opt in self.question.options]
        self.selected_default = selected_default(self.question)

    def _find(self, identity: IdentityRef) -> Optional[OptionDefinition]:
        for opt in self.question.options:
            if _matches(opt, identity):
                return opt
        return None

    # ------------------------------------------------------------------
    # Question fields
    # ------------------------------------------------------------------

    def set_text(self, text: str) -> None:
        self.question.question_text = text or ""

    def set_required(self, required: bool) -> None:
        self.question.is_required = bool(required)

    def change_type(self, new_type: str) -> None:
        """Switch the question type.

        Moving to a type without options clears the options and any default.
        Moving between option-bearing types keeps the options untouched.
        """
        self.question.question_type = new_type or ""
        if not carries_options(self.question.question_type):
            if self.question.options:
                logger.info(
                    "builder_options_cleared question_id=%s new_type=%s dropped=%s",
                    self.question.question_id,
                    new_type,
                    len(self.question.options),
                )
            self.question.options = []
        self._refresh_default_choices()

    # ------------------------------------------------------------------
    # Options
    # ------------------------------------------------------------------

    def add_option(self) -> OptionDefinition:
        opt = OptionDefinition(
            option_id=None,
            value="",
            is_active=True,
            is_default=False,
            sequence_number=len(self.question.options) + 1,
            draft_id=next(self._draft_counter),
        )
        self.question.options.append(opt)
        self._refresh_default_choices()
        return opt

    def update_option(
        self,
        identity: IdentityRef,
        *,
        value: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> bool:
        opt = self._find(identity)
        if opt is None:
            return False
        if value is not None:
            opt.value = value
        if is_active is not None:
            opt.is_active = bool(is_active)
        self._refresh_default_choices()
        return True

    def delete_option(self, identity: IdentityRef) -> bool:
        """Remove the matching option.

        Remaining sequence numbers are left as they are (gaps allowed until
        the next reorder). Deleting the default leaves no default.
        """
        before = len(self.question.options)
        self.question.options = [opt for opt in self.question.options if not _matches(opt, identity)]
        self._refresh_default_choices()
        return len(self.question.options) != before

    def set_default(self, identity: IdentityRef) -> None:
        """Make the matching option the only default.

        An identity matching no option clears every default.
        """
        matched = False
        for opt in self.question.options:
            opt.is_default = _matches(opt, identity)
            matched = matched or opt.is_default
        if not matched:
            logger.info("builder_default_cleared identity=%s", identity)
        self._refresh_default_choices()

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def validate(self) -> None:
        if not (self.question.question_text or "").strip() or not self.question.question_type:
            raise ValidationFault(REQUIRED_FIELDS_MESSAGE)

    def build_request(self) -> SaveQuestionRequest:
        q = self.question
        header = q.model_copy(update={"options": []})
        options: Optional[List[OptionDefinition]] = None
        if self.is_option_type and q.options:
            options = [opt.model_copy() for opt in q.options]
        return SaveQuestionRequest(question=header, options=options)

    async def save(self, save_question_with_options: SaveCallable) -> SavedQuestion:
        """Validate and persist the working copy.

        Raises ``ValidationFault`` without calling persistence when text or
        type is missing. A ``RemoteFault`` from persistence propagates and
        the working copy stays as it is for a retry.
        """
        self.validate()
        result = await save_question_with_options(self.build_request())
        self.saved = True
        if result.question_id and not self.question.question_id:
            self.question.question_id = result.question_id
        logger.info("builder_saved question_id=%s", result.question_id)
        return result


def _matches(opt: OptionDefinition, identity: IdentityRef) -> bool:
    if isinstance(identity, str):
        return bool(identity) and opt.key == identity
    return opt.identity == identity


__all__ = [
    "REQUIRED_FIELDS_MESSAGE",
    "QuestionSchemaBuilder",
]
