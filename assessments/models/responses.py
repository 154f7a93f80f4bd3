"""Pydantic models for answering sessions and their stored responses."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from assessments.models.questions import QuestionDefinition


class ResponseRecord(BaseModel):
    question_id: str
    raw_value: str
    record_id: Optional[str] = None
    object_api_name: Optional[str] = None


class SaveResponsesRequest(BaseModel):
    responses: List[ResponseRecord] = Field(default_factory=list)


class InstanceQuestionsAndResponses(BaseModel):
    questions: List[QuestionDefinition] = Field(default_factory=list)
    # question_id -> raw stored value
    responses: Dict[str, str] = Field(default_factory=dict)


class AssessmentInstance(BaseModel):
    instance_id: str
    record_id: str
    object_api_name: Optional[str] = None
    template_id: str
    name: Optional[str] = None
    created_at: Optional[str] = None


class CreateInstanceRequest(BaseModel):
    object_api_name: str
    field_api_name: str


class Acknowledgement(BaseModel):
    ok: bool = True
    count: Optional[int] = None


__all__ = [
    "ResponseRecord",
    "SaveResponsesRequest",
    "InstanceQuestionsAndResponses",
    "AssessmentInstance",
    "CreateInstanceRequest",
    "Acknowledgement",
]
