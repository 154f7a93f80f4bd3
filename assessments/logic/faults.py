"""Fault kinds raised by the engine and its collaborators.

- ``ValidationFault``: a required answer is missing, or a question aggregate
  lacks text/type at save time. Blocks the action; no call is issued.
- ``ConfigurationFault``: no template is associated with the record.
- ``RemoteFault``: any failure of a persistence call. ``body`` holds the
  decoded error document returned by the backend, when there was one.

``error_message()`` turns any of these (or a plain string) into the text
shown to the user.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."


class AssessmentFault(ValueError):
    code = "ASSESSMENT_FAULT"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class ValidationFault(AssessmentFault):
    code = "VALIDATION_FAULT"


class ConfigurationFault(AssessmentFault):
    code = "CONFIGURATION_FAULT"


class RemoteFault(AssessmentFault):
    code = "REMOTE_FAULT"

    def __init__(
        self,
        message: str = "",
        *,
        body: Any = None,
        status: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.body = body
        self.status = status


class NotFound(AssessmentFault):
    code = "NOT_FOUND"


def _body_message(body: Any) -> Optional[str]:
    if not isinstance(body, Mapping):
        return None
    msg = body.get("message")
    if isinstance(msg, str) and msg:
        return msg
    page_errors = body.get("pageErrors")
    if isinstance(page_errors, (list, tuple)) and page_errors:
        first = page_errors[0]
        if isinstance(first, Mapping):
            first_msg = first.get("message")
            if isinstance(first_msg, str) and first_msg:
                return first_msg
    return None


def error_message(fault: Any) -> str:
    """Map a fault to a human-readable message.

    Precedence: structured body ``message`` -> first ``pageErrors`` message
    -> the fault's own message -> the fault itself when it is text ->
    ``UNKNOWN_ERROR_MESSAGE``.
    """
    if fault is None:
        return UNKNOWN_ERROR_MESSAGE
    if isinstance(fault, str):
        return fault or UNKNOWN_ERROR_MESSAGE
    if isinstance(fault, Mapping):
        # Plain error documents, e.g. {"body": {...}, "message": "..."}
        from_body = _body_message(fault.get("body"))
        if from_body:
            return from_body
        msg = fault.get("message")
        if isinstance(msg, str) and msg:
            return msg
        return UNKNOWN_ERROR_MESSAGE
    from_body = _body_message(getattr(fault, "body", None))
    if from_body:
        return from_body
    msg = getattr(fault, "message", None)
    if isinstance(msg, str) and msg:
        return msg
    if isinstance(fault, BaseException) and fault.args and isinstance(fault.args[0], str) and fault.args[0]:
        return fault.args[0]
    return UNKNOWN_ERROR_MESSAGE


__all__ = [
    "UNKNOWN_ERROR_MESSAGE",
    "AssessmentFault",
    "ValidationFault",
    "ConfigurationFault",
    "RemoteFault",
    "NotFound",
    "error_message",
]
