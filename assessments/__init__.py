"""Assessment questionnaire service.

Provides the questionnaire engine (question type taxonomy, answer codec,
response store, submission gate, question editor and reorder logic), a
FastAPI backend persisting templates, questions and answers, and async
session controllers that drive an answering or authoring UI against that
backend.
"""

from __future__ import annotations

from assessments.main import create_app

__all__ = ["create_app"]
