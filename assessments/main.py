from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError

from assessments.config import AppConfig, load_config
from assessments.db.base import get_engine
from assessments.db.migrations_runner import apply_migrations
from assessments.http.problem import (
    handle_assessment_fault,
    handle_http_exception,
    handle_request_validation_error,
    handle_unexpected_error,
)
from assessments.http.request_id import RequestIdMiddleware
from assessments.logging_setup import configure_logging
from assessments.logic.faults import AssessmentFault
from assessments.routes import api_router

logger = logging.getLogger(__name__)


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    """Build the assessment backend application.

    Migrations run at startup unless ``migrations.auto_apply`` is off; the
    test bootstrap applies them itself and disables the flag.
    """
    configure_logging(os.environ.get("LOG_LEVEL"))
    cfg = config or load_config()
    engine = get_engine(cfg.database.dsn)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        if cfg.migrations.auto_apply:
            applied = apply_migrations(engine)
            logger.info("startup_migrations applied=%s", applied)
        else:
            logger.info("AUTO_APPLY_MIGRATIONS disabled; skipping migrations at startup")
        yield

    app = FastAPI(title="Assessment Service", lifespan=lifespan)
    app.state.config = cfg

    app.add_exception_handler(AssessmentFault, handle_assessment_fault)
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(api_router, prefix="/api/v1")

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    return app


def run() -> None:  # pragma: no cover - process entrypoint
    import uvicorn

    uvicorn.run(create_app(), host="0.0.0.0", port=8000, log_config=None)


# Intentionally do not instantiate the app at import time to prevent side effects.
