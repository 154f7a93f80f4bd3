from __future__ import annotations

"""Functional test bootstrap.

Points the service at a file-backed SQLite database under ``tmp/`` before any
engine is built, applies the SQL migrations once per session and empties the
tables before each test that asks for the database. Also provides an
in-memory ``AssessmentBackend`` double and a recording notifier for the
session controller tests.
"""

import os
import pathlib
from typing import Dict, List, Optional, Sequence

import pytest

_ROOT = pathlib.Path(__file__).resolve().parents[2]
_DB_FILE = _ROOT / "tmp" / "functional_tests.db"
_DB_FILE.parent.mkdir(parents=True, exist_ok=True)
if _DB_FILE.exists():
    _DB_FILE.unlink()

os.environ["TEST_DATABASE_URL"] = f"sqlite:///{_DB_FILE}"
os.environ["DATABASE_URL"] = os.environ["TEST_DATABASE_URL"]
# Migrations are applied once below, not on every app startup
os.environ["AUTO_APPLY_MIGRATIONS"] = "0"

from sqlalchemy import text as sql_text  # noqa: E402

from assessments.db.base import get_engine  # noqa: E402
from assessments.db.migrations_runner import apply_migrations  # noqa: E402
from assessments.logic.faults import NotFound, RemoteFault  # noqa: E402
from assessments.models.questions import (  # noqa: E402
    OptionDefinition,
    QuestionDefinition,
    SavedQuestion,
    SaveQuestionRequest,
)
from assessments.models.responses import (  # noqa: E402
    Acknowledgement,
    AssessmentInstance,
    InstanceQuestionsAndResponses,
    ResponseRecord,
)

_TABLES = (
    "assessment_response",
    "assessment_instance",
    "question_option",
    "question",
    "record_template_binding",
    "assessment_template",
)


@pytest.fixture(scope="session", autouse=True)
def functional_sqlite_bootstrap() -> None:
    apply_migrations(get_engine(os.environ["TEST_DATABASE_URL"]))
    yield


@pytest.fixture
def clean_db():
    eng = get_engine()
    with eng.begin() as conn:
        for table in _TABLES:
            conn.execute(sql_text(f"DELETE FROM {table}"))
    return eng


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def app(clean_db):
    from assessments.main import create_app

    return create_app()


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient

    with TestClient(app) as c:
        yield c


class RecordingNotifier:
    def __init__(self) -> None:
        self.calls: List[Dict[str, str]] = []

    def __call__(self, title: str, message: str, severity: str) -> None:
        self.calls.append({"title": title, "message": message, "severity": severity})

    @property
    def last(self) -> Optional[Dict[str, str]]:
        return self.calls[-1] if self.calls else None

    def severities(self) -> List[str]:
        return [c["severity"] for c in self.calls]


class FakeBackend:
    """In-memory ``AssessmentBackend`` recording every call made to it.

    Set ``fail[<method name>]`` to a ``RemoteFault`` to make that call fail.
    """

    def __init__(self) -> None:
        self.calls: List[tuple] = []
        self.fail: Dict[str, Exception] = {}
        self.template_ids: Dict[tuple, str] = {}
        self.questions: Dict[str, List[QuestionDefinition]] = {}
        self.instances: Dict[str, AssessmentInstance] = {}
        self.responses: Dict[str, Dict[str, str]] = {}
        self._next_id = 0

    def _enter(self, name: str, *args) -> None:  # type: ignore[no-untyped-def]
        self.calls.append((name,) + args)
        if name in self.fail:
            raise self.fail[name]

    def call_names(self) -> List[str]:
        return [c[0] for c in self.calls]

    def _new_id(self, prefix: str) -> str:
        self._next_id += 1
        return f"{prefix}-{self._next_id}"

    async def fetch_template_id(self, record_id, object_api_name, field_api_name):  # type: ignore[no-untyped-def]
        self._enter("fetch_template_id", record_id, object_api_name, field_api_name)
        return self.template_ids.get((record_id, object_api_name, field_api_name))

    async def fetch_questions(self, template_id: str) -> List[QuestionDefinition]:
        self._enter("fetch_questions", template_id)
        return [q.model_copy(deep=True) for q in self.questions.get(template_id, [])]

    async def fetch_instance_questions_and_responses(self, instance_id: str) -> InstanceQuestionsAndResponses:
        self._enter("fetch_instance_questions_and_responses", instance_id)
        instance = self.instances.get(instance_id)
        if instance is None:
            raise RemoteFault("not found", body={"message": "assessment instance not found"}, status=404)
        return InstanceQuestionsAndResponses(
            questions=[q.model_copy(deep=True) for q in self.questions.get(instance.template_id, [])],
            responses=dict(self.responses.get(instance_id, {})),
        )

    async def save_responses(self, instance_id: str, records: Sequence[ResponseRecord]) -> Acknowledgement:
        self._enter("save_responses", instance_id, list(records))
        stored = self.responses.setdefault(instance_id, {})
        for rec in records:
            stored[rec.question_id] = rec.raw_value
        return Acknowledgement(ok=True, count=len(records))

    async def save_question_with_options(self, request: SaveQuestionRequest) -> SavedQuestion:
        self._enter("save_question_with_options", request)
        q = request.question.model_copy(deep=True)
        if not q.question_id:
            q.question_id = self._new_id("q")
        q.options = []
        for opt in request.options or []:
            saved = opt.model_copy()
            saved.option_id = saved.option_id or self._new_id("o")
            q.options.append(saved)
        bucket = self.questions.setdefault(q.template_id or "", [])
        bucket[:] = [existing for existing in bucket if existing.question_id != q.question_id] + [q]
        return SavedQuestion(question_id=q.question_id, option_ids=[o.option_id for o in q.options])

    async def update_question_sequences(self, questions: Sequence[QuestionDefinition]) -> Acknowledgement:
        self._enter("update_question_sequences", [q.model_copy(deep=True) for q in questions])
        return Acknowledgement(ok=True, count=len(questions))

    async def delete_question(self, question_id: str) -> None:
        self._enter("delete_question", question_id)
        for bucket in self.questions.values():
            bucket[:] = [q for q in bucket if q.question_id != question_id]

    async def list_instances(self, record_id: str, object_api_name: Optional[str] = None) -> List[AssessmentInstance]:
        self._enter("list_instances", record_id, object_api_name)
        return [i for i in self.instances.values() if i.record_id == record_id]

    async def create_instance(self, record_id: str, object_api_name: str, field_api_name: str) -> AssessmentInstance:
        self._enter("create_instance", record_id, object_api_name, field_api_name)
        template_id = self.template_ids.get((record_id, object_api_name, field_api_name))
        if template_id is None:
            raise NotFound("no template")
        instance = AssessmentInstance(
            instance_id=self._new_id("inst"),
            record_id=record_id,
            object_api_name=object_api_name,
            template_id=template_id,
        )
        self.instances[instance.instance_id] = instance
        return instance


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


def make_question(
    question_id: Optional[str],
    question_type: str,
    *,
    text: str = "Question",
    required: bool = False,
    sequence: int = 1,
    options: Sequence[str] = (),
    template_id: str = "tpl-1",
    default: Optional[str] = None,
) -> QuestionDefinition:
    return QuestionDefinition(
        question_id=question_id,
        template_id=template_id,
        question_text=text,
        question_type=question_type,
        is_required=required,
        sequence_number=sequence,
        options=[
            OptionDefinition(
                option_id=f"{question_id}-opt-{i + 1}" if question_id else None,
                value=value,
                is_default=(value == default),
                sequence_number=i + 1,
            )
            for i, value in enumerate(options)
        ],
    )


@pytest.fixture
def question_factory():
    return make_question
