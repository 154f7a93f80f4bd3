"""Answering routes: assessment instances and their responses."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Query

from assessments.logic.assessment_session import NO_TEMPLATE_MESSAGE
from assessments.logic.faults import ConfigurationFault
from assessments.logic.repository_answers import (
    fetch_instance_questions_and_responses,
    save_responses,
)
from assessments.logic.repository_instances import create_instance, list_instances
from assessments.logic.repository_templates import fetch_template_id
from assessments.models.responses import (
    Acknowledgement,
    AssessmentInstance,
    CreateInstanceRequest,
    InstanceQuestionsAndResponses,
    SaveResponsesRequest,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get(
    "/records/{record_id}/instances",
    summary="List assessment instances of a record",
    operation_id="getAssessmentInstances",
    tags=["Instances"],
    response_model=List[AssessmentInstance],
)
def get_instances(record_id: str, object_api_name: Optional[str] = Query(None)) -> List[AssessmentInstance]:
    return list_instances(record_id, object_api_name)


@router.post(
    "/records/{record_id}/instances",
    summary="Start a new assessment instance for a record",
    operation_id="createNewAssessmentInstance",
    tags=["Instances"],
    response_model=AssessmentInstance,
    status_code=201,
)
def post_instance(record_id: str, payload: CreateInstanceRequest) -> AssessmentInstance:
    template_id = fetch_template_id(record_id, payload.object_api_name, payload.field_api_name)
    if not template_id:
        raise ConfigurationFault(NO_TEMPLATE_MESSAGE)
    return create_instance(
        record_id=record_id,
        object_api_name=payload.object_api_name,
        template_id=template_id,
    )


@router.get(
    "/instances/{instance_id}/questions-and-responses",
    summary="Load an instance's questions and stored answers",
    operation_id="getAssessmentQuestionsAndResponses",
    tags=["Instances"],
    response_model=InstanceQuestionsAndResponses,
)
def get_questions_and_responses(instance_id: str) -> InstanceQuestionsAndResponses:
    return fetch_instance_questions_and_responses(instance_id)


@router.post(
    "/instances/{instance_id}/responses",
    summary="Save an instance's answers",
    operation_id="saveAssessmentResponses",
    tags=["Instances"],
    response_model=Acknowledgement,
)
def post_responses(instance_id: str, payload: SaveResponsesRequest) -> Acknowledgement:
    return Acknowledgement(ok=True, count=save_responses(instance_id, payload.responses))


__all__ = ["router"]
