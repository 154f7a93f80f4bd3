"""Authoring routes: question catalog reads and writes for one template."""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter
from fastapi.responses import Response

from assessments.logic.faults import NotFound
from assessments.logic.repository_questions import (
    delete_question,
    list_questions,
    save_question_with_options,
    update_question_sequences,
)
from assessments.logic.repository_templates import template_exists
from assessments.models.questions import (
    QuestionDefinition,
    QuestionSequencesRequest,
    SavedQuestion,
    SaveQuestionRequest,
)
from assessments.models.responses import Acknowledgement

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get(
    "/templates/{template_id}/questions",
    summary="List a template's questions with their options",
    operation_id="fetchQuestions",
    tags=["Authoring"],
    response_model=List[QuestionDefinition],
)
def get_questions(template_id: str) -> List[QuestionDefinition]:
    if not template_exists(template_id):
        raise NotFound(f"template {template_id} not found")
    return list_questions(template_id)


@router.post(
    "/questions",
    summary="Create or update a question and its options",
    operation_id="saveQuestionWithOptions",
    tags=["Authoring"],
    response_model=SavedQuestion,
)
def save_question(payload: SaveQuestionRequest) -> SavedQuestion:
    logger.info(
        "authoring.question.save question_id=%s type=%s options=%s",
        payload.question.question_id,
        payload.question.question_type,
        None if payload.options is None else len(payload.options),
    )
    return save_question_with_options(payload.question, payload.options)


@router.put(
    "/question-sequences",
    summary="Persist the sequence numbers of reordered questions",
    operation_id="updateQuestionSequences",
    tags=["Authoring"],
    response_model=Acknowledgement,
)
def put_question_sequences(payload: QuestionSequencesRequest) -> Acknowledgement:
    return Acknowledgement(ok=True, count=update_question_sequences(payload.questions))


@router.delete(
    "/questions/{question_id}",
    summary="Delete a question with its options and responses",
    operation_id="deleteQuestion",
    tags=["Authoring"],
    status_code=204,
)
def remove_question(question_id: str) -> Response:
    delete_question(question_id)
    return Response(status_code=204)


__all__ = ["router"]
