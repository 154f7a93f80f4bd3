"""Async client for the assessment backend.

``AssessmentBackend`` is the persistence contract the session controllers
depend on. ``HttpAssessmentBackend`` implements it over ``httpx``; every
transport error and every non-2xx response surfaces as a ``RemoteFault``
whose ``body`` is the decoded problem document, so ``error_message()`` can
pick the most specific text.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Protocol, Sequence

import httpx
from pydantic import TypeAdapter

from assessments.logic.faults import RemoteFault
from assessments.models.questions import (
    QuestionDefinition,
    QuestionSequencesRequest,
    SavedQuestion,
    SaveQuestionRequest,
    TemplateLookup,
)
from assessments.models.responses import (
    Acknowledgement,
    AssessmentInstance,
    CreateInstanceRequest,
    InstanceQuestionsAndResponses,
    ResponseRecord,
    SaveResponsesRequest,
)

logger = logging.getLogger(__name__)

_QUESTIONS = TypeAdapter(List[QuestionDefinition])
_INSTANCES = TypeAdapter(List[AssessmentInstance])


class AssessmentBackend(Protocol):
    async def fetch_template_id(
        self, record_id: str, object_api_name: str, field_api_name: str
    ) -> Optional[str]: ...

    async def fetch_questions(self, template_id: str) -> List[QuestionDefinition]: ...

    async def fetch_instance_questions_and_responses(
        self, instance_id: str
    ) -> InstanceQuestionsAndResponses: ...

    async def save_responses(
        self, instance_id: str, records: Sequence[ResponseRecord]
    ) -> Acknowledgement: ...

    async def save_question_with_options(self, request: SaveQuestionRequest) -> SavedQuestion: ...

    async def update_question_sequences(
        self, questions: Sequence[QuestionDefinition]
    ) -> Acknowledgement: ...

    async def delete_question(self, question_id: str) -> None: ...

    async def list_instances(
        self, record_id: str, object_api_name: Optional[str] = None
    ) -> List[AssessmentInstance]: ...

    async def create_instance(
        self, record_id: str, object_api_name: str, field_api_name: str
    ) -> AssessmentInstance: ...


class HttpAssessmentBackend:
    """``AssessmentBackend`` over HTTP.

    ``base_url`` includes the API prefix, e.g. ``http://host/api/v1``. Pass
    ``transport`` to route requests elsewhere (tests use
    ``httpx.ASGITransport`` against the FastAPI app).
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_config(cls, config, **kwargs: Any) -> "HttpAssessmentBackend":  # type: ignore[no-untyped-def]
        return cls(config.client.base_url, timeout=config.client.timeout_seconds, **kwargs)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpAssessmentBackend":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("backend_transport_error method=%s path=%s", method, path, exc_info=True)
            raise RemoteFault(str(exc) or exc.__class__.__name__) from exc
        if resp.status_code >= 400:
            body: Any
            try:
                body = resp.json()
            except ValueError:
                body = {"message": resp.text} if resp.text else None
            logger.error(
                "backend_error method=%s path=%s status=%s body=%s",
                method,
                path,
                resp.status_code,
                body,
            )
            raise RemoteFault(f"Request failed with status {resp.status_code}", body=body, status=resp.status_code)
        return resp

    async def fetch_template_id(
        self, record_id: str, object_api_name: str, field_api_name: str
    ) -> Optional[str]:
        resp = await self._request(
            "GET",
            "/templates/lookup",
            params={
                "record_id": record_id,
                "object_api_name": object_api_name,
                "field_api_name": field_api_name,
            },
        )
        return TemplateLookup.model_validate(resp.json()).template_id

    async def fetch_questions(self, template_id: str) -> List[QuestionDefinition]:
        resp = await self._request("GET", f"/templates/{template_id}/questions")
        return _QUESTIONS.validate_python(resp.json())

    async def fetch_instance_questions_and_responses(
        self, instance_id: str
    ) -> InstanceQuestionsAndResponses:
        resp = await self._request("GET", f"/instances/{instance_id}/questions-and-responses")
        return InstanceQuestionsAndResponses.model_validate(resp.json())

    async def save_responses(
        self, instance_id: str, records: Sequence[ResponseRecord]
    ) -> Acknowledgement:
        payload = SaveResponsesRequest(responses=list(records))
        resp = await self._request(
            "POST",
            f"/instances/{instance_id}/responses",
            json=payload.model_dump(mode="json"),
        )
        return Acknowledgement.model_validate(resp.json())

    async def save_question_with_options(self, request: SaveQuestionRequest) -> SavedQuestion:
        resp = await self._request("POST", "/questions", json=request.model_dump(mode="json"))
        return SavedQuestion.model_validate(resp.json())

    async def update_question_sequences(
        self, questions: Sequence[QuestionDefinition]
    ) -> Acknowledgement:
        payload = QuestionSequencesRequest(questions=list(questions))
        resp = await self._request("PUT", "/question-sequences", json=payload.model_dump(mode="json"))
        return Acknowledgement.model_validate(resp.json())

    async def delete_question(self, question_id: str) -> None:
        await self._request("DELETE", f"/questions/{question_id}")

    async def list_instances(
        self, record_id: str, object_api_name: Optional[str] = None
    ) -> List[AssessmentInstance]:
        params = {"object_api_name": object_api_name} if object_api_name else None
        resp = await self._request("GET", f"/records/{record_id}/instances", params=params)
        return _INSTANCES.validate_python(resp.json())

    async def create_instance(
        self, record_id: str, object_api_name: str, field_api_name: str
    ) -> AssessmentInstance:
        payload = CreateInstanceRequest(object_api_name=object_api_name, field_api_name=field_api_name)
        resp = await self._request("POST", f"/records/{record_id}/instances", json=payload.model_dump())
        return AssessmentInstance.model_validate(resp.json())


__all__ = ["AssessmentBackend", "HttpAssessmentBackend"]
