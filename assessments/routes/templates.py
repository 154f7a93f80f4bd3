"""Template lookup endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Query

from assessments.logic.repository_templates import fetch_template_id
from assessments.models.questions import TemplateLookup

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get(
    "/templates/lookup",
    summary="Resolve the template associated with a record",
    operation_id="fetchTemplateId",
    tags=["Templates"],
    response_model=TemplateLookup,
)
def lookup_template(
    record_id: str = Query(...),
    object_api_name: str = Query(...),
    field_api_name: str = Query(...),
) -> TemplateLookup:
    # Absence is a normal answer here; the client decides it is a configuration fault
    return TemplateLookup(template_id=fetch_template_id(record_id, object_api_name, field_api_name))


__all__ = ["router", "lookup_template"]
