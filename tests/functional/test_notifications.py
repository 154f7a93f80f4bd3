"""Default notifier: logging plus a bounded buffer of recent notifications."""

from __future__ import annotations

import pytest

from assessments.logic import events
from assessments.logic.assessment_session import AssessmentSession
from assessments.logic.faults import RemoteFault


@pytest.fixture(autouse=True)
def empty_buffer():
    events.get_buffered_notifications()
    yield
    events.get_buffered_notifications()


def test_notify_buffers_and_read_clears() -> None:
    events.notify("Success", "Saved.", events.SUCCESS)
    events.notify("Error", "Failed.", events.ERROR)
    assert events.get_buffered_notifications(clear=False) == [
        {"title": "Success", "message": "Saved.", "severity": "success"},
        {"title": "Error", "message": "Failed.", "severity": "error"},
    ]
    assert len(events.get_buffered_notifications()) == 2
    assert events.get_buffered_notifications() == []


def test_unknown_severity_is_still_delivered() -> None:
    events.notify("Heads up", "Odd severity", "loud")
    assert events.get_buffered_notifications()[0]["severity"] == "loud"


@pytest.mark.anyio
async def test_repeated_failures_keep_buffer_bounded(fake_backend) -> None:
    fake_backend.fail["fetch_instance_questions_and_responses"] = RemoteFault("down")
    session = AssessmentSession(fake_backend, record_id="rec-1", object_api_name="Account")
    session.instance_id = "inst-1"
    for _ in range(events.BUFFER_LIMIT * 5):
        assert await session.reload() is False
    buffered = events.get_buffered_notifications()
    assert len(buffered) == events.BUFFER_LIMIT
    assert buffered[-1] == {"title": "Error", "message": "down", "severity": events.ERROR}
