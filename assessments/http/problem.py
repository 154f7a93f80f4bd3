"""Problem+JSON utilities and global exception handlers.

Every error body carries ``title``, ``status``, ``detail``, ``code`` and a
``message`` field; request-model validation failures additionally carry
``pageErrors`` so clients can surface the first field-level message.
"""

from __future__ import annotations

from typing import Any, Dict
import logging

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from assessments.http.error_mapping import lookup
from assessments.logic.faults import AssessmentFault, error_message

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)


def problem(status: int, title: str, detail: str, code: str, **extra: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "type": "about:blank",
        "title": title,
        "status": int(status),
        "detail": detail,
        "message": detail,
        "code": code,
    }
    body.update(extra)
    return body


def problem_response(body: Dict[str, Any]) -> JSONResponse:
    return JSONResponse(body, status_code=int(body.get("status", 500)), media_type=PROBLEM_MEDIA_TYPE)


async def handle_assessment_fault(request: Request, exc: AssessmentFault) -> JSONResponse:
    mapping = lookup(exc)
    status = int(mapping["status"])  # type: ignore[arg-type]
    logger.info(
        "error_handler.fault path=%s code=%s status=%s",
        request.url.path,
        mapping["code"],
        status,
    )
    return problem_response(problem(status, str(mapping["title"]), error_message(exc), str(mapping["code"])))


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    status = int(getattr(exc, "status_code", 500) or 500)
    if isinstance(exc.detail, dict):
        body = {"status": status, **exc.detail}
        body.setdefault("message", body.get("detail", ""))
        return problem_response(body)
    detail = str(exc.detail or "")
    return problem_response(problem(status, "Error", detail, f"HTTP_{status}"))


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    page_errors = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        msg = str(err.get("msg", "invalid value"))
        page_errors.append({"message": f"{loc}: {msg}" if loc else msg, "path": loc})
    body = problem(422, "Invalid Request", "Request validation failed", "REQUEST_INVALID", pageErrors=page_errors)
    # The field-level message reads better than the generic one
    body.pop("message")
    return problem_response(body)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unexpected_error path=%s", request.url.path, exc_info=exc)
    return problem_response(problem(500, "Internal Server Error", "Internal Server Error", "INTERNAL_ERROR"))


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "problem",
    "problem_response",
    "handle_assessment_fault",
    "handle_http_exception",
    "handle_request_validation_error",
    "handle_unexpected_error",
]
