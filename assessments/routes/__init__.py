"""APIRouter registration for the assessment backend."""

from __future__ import annotations

from fastapi import APIRouter

from assessments.routes.authoring import router as authoring_router
from assessments.routes.instances import router as instances_router
from assessments.routes.templates import router as templates_router

api_router = APIRouter()
api_router.include_router(templates_router)
api_router.include_router(authoring_router)
api_router.include_router(instances_router)

__all__ = ["api_router"]
