"""Authoring session controller for one template's question catalog.

Holds the loaded question list, at most one open ``QuestionSchemaBuilder``,
and an in-flight guard so a second save, delete or reorder of the same
aggregate is refused while the first is pending.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, List, Optional, Protocol, Set

from assessments.logic import events
from assessments.logic.backend_client import AssessmentBackend
from assessments.logic.faults import AssessmentFault, ValidationFault, error_message
from assessments.logic.order_sequences import move_item, renumber
from assessments.logic.question_schema_builder import QuestionSchemaBuilder
from assessments.models.questions import QuestionDefinition

logger = logging.getLogger(__name__)

DELETE_CONFIRM_MESSAGE = "Are you sure you want to delete this question?"

Confirm = Callable[[str], Awaitable[bool]]
MoveHandler = Callable[[int, int], Awaitable[bool]]

_SEQUENCE_KEY = "__sequence__"


class ReorderController(Protocol):
    """Drag-and-drop capability; reports each completed drag as (from, to)."""

    def attach(self, container: Any, on_move: MoveHandler) -> None: ...


async def _decline(_message: str) -> bool:
    return False


class QuestionAuthoringSession:
    def __init__(
        self,
        backend: AssessmentBackend,
        template_id: str,
        *,
        notifier: events.Notifier = events.notify,
        confirm: Confirm = _decline,
    ) -> None:
        self.backend = backend
        self.template_id = template_id
        self.notify = notifier
        self.confirm = confirm

        self.questions: List[QuestionDefinition] = []
        self.editor: Optional[QuestionSchemaBuilder] = None
        self.loading = False
        self.error: Optional[Any] = None
        self.reorder_attached = False
        self._pending: Set[str] = set()

    # ------------------------------------------------------------------
    # In-flight guard
    # ------------------------------------------------------------------

    def is_pending(self, key: str) -> bool:
        return key in self._pending

    def _claim(self, key: str, action: str) -> bool:
        if key in self._pending:
            logger.info("authoring_%s_ignored reason=pending key=%s", action, key)
            return False
        self._pending.add(key)
        return True

    def _release(self, key: str) -> None:
        self._pending.discard(key)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load_questions(self) -> bool:
        self.loading = True
        try:
            loaded = await self.backend.fetch_questions(self.template_id)
        except AssessmentFault as exc:
            self._report("Error loading questions", exc)
            return False
        finally:
            self.loading = False
        # Display order is authoritative; stored numbers may have gaps
        self.questions = renumber(loaded)
        logger.info("authoring_loaded template_id=%s questions=%s", self.template_id, len(self.questions))
        return True

    def find(self, question_id: str) -> Optional[QuestionDefinition]:
        for q in self.questions:
            if q.question_id == question_id:
                return q
        return None

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    @property
    def modal_title(self) -> str:
        if self.editor is not None and self.editor.question.question_id:
            return "Edit Question"
        return "New Question"

    def _open(self, builder: QuestionSchemaBuilder) -> QuestionSchemaBuilder:
        if self.editor is not None:
            logger.warning(
                "authoring_editor_replaced question_id=%s",
                self.editor.question.question_id,
            )
        self.editor = builder
        return builder

    def new_question(self) -> QuestionSchemaBuilder:
        return self._open(
            QuestionSchemaBuilder(template_id=self.template_id, sequence_number=len(self.questions) + 1)
        )

    def edit_question(self, question_id: str) -> Optional[QuestionSchemaBuilder]:
        question = self.find(question_id)
        if question is None:
            logger.warning("authoring_edit_unknown question_id=%s", question_id)
            return None
        return self._open(QuestionSchemaBuilder(question, template_id=self.template_id))

    def cancel_edit(self) -> None:
        self.editor = None

    async def save_question(self) -> bool:
        """Persist the open editor's working copy, then close it and reload."""
        editor = self.editor
        if editor is None:
            return False
        key = editor.question.question_id or f"new:{id(editor)}"
        if not self._claim(key, "save"):
            return False
        try:
            await editor.save(self.backend.save_question_with_options)
        except ValidationFault as exc:
            self._report("Error", exc)
            return False
        except AssessmentFault as exc:
            self._report("Error saving question", exc)
            return False
        finally:
            self._release(key)
        self.notify("Success", "Question saved successfully.", events.SUCCESS)
        if self.editor is editor:
            self.editor = None
        await self.load_questions()
        return True

    async def delete_question(self, question_id: str) -> bool:
        """Ask for confirmation, then delete the question and reload."""
        if not self._claim(question_id, "delete"):
            return False
        try:
            if not await self.confirm(DELETE_CONFIRM_MESSAGE):
                return False
            try:
                await self.backend.delete_question(question_id)
            except AssessmentFault as exc:
                self._report("Error deleting question", exc)
                return False
        finally:
            self._release(question_id)
        self.notify("Success", "Question deleted successfully.", events.SUCCESS)
        await self.load_questions()
        return True

    # ------------------------------------------------------------------
    # Reordering
    # ------------------------------------------------------------------

    def attach_reorder(self, controller: ReorderController, container: Any) -> bool:
        """Wire a drag-and-drop controller once; later calls are no-ops."""
        if self.reorder_attached:
            return False
        controller.attach(container, self.move_question)
        self.reorder_attached = True
        return True

    async def move_question(self, from_index: int, to_index: int) -> bool:
        """Apply one drag and persist the full renumbered list.

        On a backend fault the previous order is restored.
        """
        if not self._claim(_SEQUENCE_KEY, "reorder"):
            return False
        previous = self.questions
        try:
            try:
                reordered = move_item(previous, from_index, to_index)
            except IndexError:
                logger.warning("authoring_move_rejected from=%s to=%s n=%s", from_index, to_index, len(previous))
                return False
            self.questions = reordered
            try:
                await self.backend.update_question_sequences(reordered)
            except AssessmentFault as exc:
                self.questions = previous
                self._report("Error updating question order", exc)
                return False
        finally:
            self._release(_SEQUENCE_KEY)
        self.notify("Success", "Question order updated.", events.SUCCESS)
        return True

    # ------------------------------------------------------------------

    def _report(self, title: str, fault: Any) -> None:
        self.error = fault
        self.notify(title, error_message(fault), events.ERROR)


__all__ = [
    "QuestionAuthoringSession",
    "ReorderController",
    "DELETE_CONFIRM_MESSAGE",
]
