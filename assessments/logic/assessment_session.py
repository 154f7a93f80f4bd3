"""Answering session controller.

Drives one record's answering form against an ``AssessmentBackend``:
resolving the record's template, listing and creating instances, loading an
instance's questions and stored answers into a ``ResponseStore``, applying
user edits through type-aware store operations, and submitting.

Every backend fault is caught here, reported through the notifier and kept
on ``error``; in-memory answers are left as they were so the user can retry.
Loads carry a generation number and a completion for a superseded selection
is discarded.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from assessments.logic import events
from assessments.logic.backend_client import AssessmentBackend
from assessments.logic.faults import (
    AssessmentFault,
    ConfigurationFault,
    ValidationFault,
    error_message,
)
from assessments.logic.question_view import build_question_view
from assessments.logic.response_codec import encode
from assessments.logic.response_store import ResponseStore
from assessments.logic.submission_validator import is_submittable
from assessments.models.question_type import is_ordered_selection, is_toggle_selection
from assessments.models.questions import QuestionDefinition
from assessments.models.responses import AssessmentInstance, ResponseRecord

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "Please complete all required fields."
SUBMITTED_MESSAGE = "Assessment submitted successfully."
NO_TEMPLATE_MESSAGE = "No assessment template is associated with this record."
NO_INSTANCE_MESSAGE = "Select an assessment before submitting."


class AssessmentSession:
    def __init__(
        self,
        backend: AssessmentBackend,
        *,
        record_id: str,
        object_api_name: str,
        field_api_name: Optional[str] = None,
        notifier: events.Notifier = events.notify,
    ) -> None:
        self.backend = backend
        self.record_id = record_id
        self.object_api_name = object_api_name
        self.field_api_name = field_api_name
        self.notify = notifier

        self.template_id: Optional[str] = None
        self.instances: List[AssessmentInstance] = []
        self.instance_id: Optional[str] = None
        self.questions: List[QuestionDefinition] = []
        self.store = ResponseStore()
        self.is_loading = False
        self.is_submitting = False
        self.error: Optional[Any] = None
        self.configuration_error: Optional[ConfigurationFault] = None
        self._generation = 0

    # ------------------------------------------------------------------
    # Record / instance lifecycle
    # ------------------------------------------------------------------

    @property
    def is_usable(self) -> bool:
        return self.configuration_error is None

    async def load_for_record(self) -> bool:
        """Resolve the record's template and list its instances.

        A record without a template is a configuration fault: reported once
        and the session stays unusable.
        """
        if not self.field_api_name:
            return await self.load_instances()
        try:
            template_id = await self.backend.fetch_template_id(
                self.record_id, self.object_api_name, self.field_api_name
            )
        except AssessmentFault as exc:
            self._report("Error", exc)
            return False
        if not template_id:
            fault = ConfigurationFault(NO_TEMPLATE_MESSAGE)
            if self.configuration_error is None:
                self._report("Error", fault)
            self.configuration_error = fault
            return False
        self.template_id = template_id
        return await self.load_instances()

    async def load_instances(self) -> bool:
        self.is_loading = True
        try:
            self.instances = await self.backend.list_instances(self.record_id, self.object_api_name)
            return True
        except AssessmentFault as exc:
            self.error = exc
            self.notify("Error", "Error loading instances", events.ERROR)
            return False
        finally:
            self.is_loading = False

    async def create_instance(self) -> Optional[AssessmentInstance]:
        """Start a new instance for the record and select it."""
        if not self.is_usable:
            return None
        try:
            instance = await self.backend.create_instance(
                self.record_id, self.object_api_name, self.field_api_name or ""
            )
        except AssessmentFault as exc:
            self.error = exc
            self.notify("Error", "Error creating assessment instance", events.ERROR)
            return None
        self.instances.insert(0, instance)
        self.notify("Success", "New Assessment Instance Created", events.SUCCESS)
        await self.select_instance(instance.instance_id)
        return instance

    async def select_instance(self, instance_id: str) -> bool:
        self.instance_id = instance_id
        return await self.reload()

    async def reload(self) -> bool:
        """Load questions and answers for the selected instance.

        Returns False when nothing was applied: no selection, a fault, or a
        completion superseded by a newer selection.
        """
        if not self.instance_id:
            logger.warning("assessment_load_skipped reason=no_instance")
            return False
        self._generation += 1
        generation = self._generation
        instance_id = self.instance_id
        self.is_loading = True
        try:
            result = await self.backend.fetch_instance_questions_and_responses(instance_id)
        except AssessmentFault as exc:
            if generation == self._generation:
                self._report("Error", exc)
            return False
        finally:
            if generation == self._generation:
                self.is_loading = False
        if generation != self._generation:
            logger.info(
                "assessment_load_discarded instance_id=%s generation=%s current=%s",
                instance_id,
                generation,
                self._generation,
            )
            return False
        self.questions = list(result.questions)
        self.store = ResponseStore(result.responses)
        self.error = None
        logger.info(
            "assessment_loaded instance_id=%s questions=%s answers=%s",
            instance_id,
            len(self.questions),
            len(self.store),
        )
        return True

    # ------------------------------------------------------------------
    # Answers
    # ------------------------------------------------------------------

    def question(self, question_id: str) -> Optional[QuestionDefinition]:
        for q in self.questions:
            if q.question_id == question_id:
                return q
        return None

    def _type_of(self, question_id: str) -> Optional[str]:
        q = self.question(question_id)
        return q.question_type if q is not None else None

    def set_answer(self, question_id: str, value: Any) -> ResponseStore:
        """Apply a value reported by a question's widget.

        A multi-select widget reports its full ordered selection, which
        replaces the stored one. Every other type stores the encoded value.
        """
        question_type = self._type_of(question_id)
        if is_ordered_selection(question_type) and not isinstance(value, str):
            self.store = self.store.replace_ordered_selection(question_id, value or [])
        else:
            self.store = self.store.set_scalar(question_id, encode(question_type, value))
        return self.store

    def toggle_option(self, question_id: str, option_value: str, checked: bool) -> ResponseStore:
        """Check or uncheck one member of a checkbox-set answer.

        Ignored for questions of any other type.
        """
        if not is_toggle_selection(self._type_of(question_id)):
            logger.warning("assessment_toggle_ignored question_id=%s reason=not_checkbox_set", question_id)
            return self.store
        self.store = self.store.toggle_set_member(question_id, option_value, checked)
        return self.store

    @property
    def views(self) -> List[Dict[str, Any]]:
        return [build_question_view(q, self.store.get(q.question_id or "")) for q in self.questions]

    def response_records(self) -> List[ResponseRecord]:
        """Records for every question with a non-empty raw answer."""
        records: List[ResponseRecord] = []
        for q in self.questions:
            raw = self.store.get(q.question_id or "")
            if raw is None or raw == "":
                continue
            records.append(
                ResponseRecord(
                    question_id=str(q.question_id),
                    raw_value=raw,
                    record_id=self.record_id,
                    object_api_name=self.object_api_name,
                )
            )
        return records

    async def submit(self) -> bool:
        """Validate and save the current answers, then reload the instance.

        A blocked submission issues no backend call and leaves the store
        untouched. A second submit while one is pending is ignored.
        """
        if self.is_submitting:
            logger.info("assessment_submit_ignored reason=pending instance_id=%s", self.instance_id)
            return False
        if not self.instance_id:
            self._report("Error", ValidationFault(NO_INSTANCE_MESSAGE))
            return False
        if not is_submittable(self.questions, self.store):
            self._report("Error", ValidationFault(REQUIRED_FIELDS_MESSAGE))
            return False

        records = self.response_records()
        self.is_submitting = True
        self.is_loading = True
        try:
            await self.backend.save_responses(self.instance_id, records)
        except AssessmentFault as exc:
            self._report("Error", exc)
            return False
        finally:
            self.is_submitting = False
            self.is_loading = False
        logger.info("assessment_submitted instance_id=%s responses=%s", self.instance_id, len(records))
        self.notify("Success", SUBMITTED_MESSAGE, events.SUCCESS)
        self.store = ResponseStore()
        await self.reload()
        return True

    # ------------------------------------------------------------------

    @property
    def error_text(self) -> str:
        return error_message(self.error) if self.error is not None else ""

    def _report(self, title: str, fault: Any) -> None:
        self.error = fault
        self.notify(title, error_message(fault), events.ERROR)


__all__ = [
    "AssessmentSession",
    "REQUIRED_FIELDS_MESSAGE",
    "SUBMITTED_MESSAGE",
    "NO_TEMPLATE_MESSAGE",
    "NO_INSTANCE_MESSAGE",
]
