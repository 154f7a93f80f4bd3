"""Central mapping of fault kinds to problem+json codes and HTTP statuses.

Routes and exception handlers import from here instead of hardcoding
status numbers for engine faults.
"""

from __future__ import annotations

from typing import Dict

from assessments.logic.faults import (
    AssessmentFault,
    ConfigurationFault,
    NotFound,
    RemoteFault,
    ValidationFault,
)

FAULT_ERROR_MAP: Dict[type, Dict[str, object]] = {
    ValidationFault: {"code": "VALIDATION_FAULT", "status": 422, "title": "Unprocessable Entity"},
    ConfigurationFault: {"code": "CONFIGURATION_FAULT", "status": 404, "title": "Template Not Configured"},
    NotFound: {"code": "NOT_FOUND", "status": 404, "title": "Not Found"},
    RemoteFault: {"code": "REMOTE_FAULT", "status": 502, "title": "Bad Gateway"},
}

_DEFAULT = {"code": "ASSESSMENT_FAULT", "status": 400, "title": "Bad Request"}


def lookup(fault: AssessmentFault) -> Dict[str, object]:
    for cls in type(fault).__mro__:
        if cls in FAULT_ERROR_MAP:
            return FAULT_ERROR_MAP[cls]
    return _DEFAULT


__all__ = ["FAULT_ERROR_MAP", "lookup"]
