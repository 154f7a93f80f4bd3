"""HTTP contract of the assessment backend, exercised through TestClient."""

from __future__ import annotations

import pytest

from assessments.logic.repository_templates import bind_record_template, create_template
from assessments.models.question_type import QuestionType

API = "/api/v1"
RECORD = {"record_id": "rec-1", "object_api_name": "Account", "field_api_name": "Assessment_Template__c"}


@pytest.fixture
def template_id(client) -> str:
    tid = create_template("Onboarding", template_id="tpl-1")
    bind_record_template(RECORD["record_id"], RECORD["object_api_name"], RECORD["field_api_name"], tid)
    return tid


def _save(client, template_id, text, question_type, options=None, question_id=None, sequence=None, required=False):
    question = {
        "question_id": question_id,
        "template_id": template_id,
        "question_text": text,
        "question_type": question_type,
        "is_required": required,
    }
    if sequence is not None:
        question["sequence_number"] = sequence
    body = {"question": question, "options": options}
    return client.post(f"{API}/questions", json=body)


def test_health(client) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_request_id_is_echoed(client) -> None:
    resp = client.get("/health", headers={"X-Request-Id": "abc-123"})
    assert resp.headers["X-Request-Id"] == "abc-123"
    assert client.get("/health").headers.get("X-Request-Id")


def test_template_lookup(client, template_id) -> None:
    resp = client.get(f"{API}/templates/lookup", params=RECORD)
    assert resp.status_code == 200
    assert resp.json() == {"template_id": "tpl-1"}


def test_template_lookup_absent(client, template_id) -> None:
    resp = client.get(f"{API}/templates/lookup", params={**RECORD, "record_id": "other"})
    assert resp.status_code == 200
    assert resp.json() == {"template_id": None}


def test_lookup_requires_all_parameters(client) -> None:
    resp = client.get(f"{API}/templates/lookup", params={"record_id": "rec-1"})
    assert resp.status_code == 422
    body = resp.json()
    assert body["code"] == "REQUEST_INVALID"
    assert body["pageErrors"][0]["message"]


def test_question_crud(client, template_id) -> None:
    first = _save(client, template_id, "Name", QuestionType.SINGLE_LINE_TEXT)
    assert first.status_code == 200
    second = _save(
        client,
        template_id,
        "Colour",
        QuestionType.PICKLIST,
        options=[
            {"value": "Red", "sequence_number": 1},
            {"value": "Green", "sequence_number": 2, "is_default": True},
        ],
    )
    assert second.status_code == 200
    assert len(second.json()["option_ids"]) == 2

    listed = client.get(f"{API}/templates/{template_id}/questions").json()
    assert [q["question_text"] for q in listed] == ["Name", "Colour"]
    assert [q["sequence_number"] for q in listed] == [1, 2]
    colour = listed[1]
    assert [o["value"] for o in colour["options"]] == ["Red", "Green"]
    assert [o["is_default"] for o in colour["options"]] == [False, True]

    # switch to a type without options: stored options go away
    changed = _save(
        client,
        template_id,
        "Favourite number",
        QuestionType.NUMBER,
        options=colour["options"],
        question_id=colour["question_id"],
        sequence=2,
    )
    assert changed.status_code == 200
    assert changed.json()["option_ids"] == []
    listed = client.get(f"{API}/templates/{template_id}/questions").json()
    assert listed[1]["question_type"] == QuestionType.NUMBER
    assert listed[1]["options"] == []

    assert client.delete(f"{API}/questions/{colour['question_id']}").status_code == 204
    listed = client.get(f"{API}/templates/{template_id}/questions").json()
    assert [q["question_text"] for q in listed] == ["Name"]


def test_editing_options_keeps_ids_and_drops_removed(client, template_id) -> None:
    saved = _save(
        client,
        template_id,
        "Pick",
        QuestionType.CHECKBOXES,
        options=[{"value": "A", "sequence_number": 1}, {"value": "B", "sequence_number": 2}],
    ).json()
    keep = saved["option_ids"][0]
    resaved = _save(
        client,
        template_id,
        "Pick",
        QuestionType.CHECKBOXES,
        question_id=saved["question_id"],
        sequence=1,
        options=[{"option_id": keep, "value": "A2", "sequence_number": 1}, {"value": "C", "sequence_number": 2}],
    ).json()
    assert resaved["option_ids"][0] == keep
    options = client.get(f"{API}/templates/{template_id}/questions").json()[0]["options"]
    assert [o["value"] for o in options] == ["A2", "C"]


def test_save_rejects_blank_text(client, template_id) -> None:
    resp = _save(client, template_id, "   ", QuestionType.NUMBER)
    assert resp.status_code == 422
    assert resp.headers["content-type"].startswith("application/problem+json")
    assert resp.json()["message"] == "Please complete all required fields."


def test_save_rejects_two_defaults(client, template_id) -> None:
    resp = _save(
        client,
        template_id,
        "Pick",
        QuestionType.RADIO_BUTTONS,
        options=[{"value": "A", "is_default": True}, {"value": "B", "is_default": True}],
    )
    assert resp.status_code == 422
    assert resp.json()["code"] == "VALIDATION_FAULT"


def test_save_for_unknown_template(client) -> None:
    resp = _save(client, "no-such-template", "Name", QuestionType.SINGLE_LINE_TEXT)
    assert resp.status_code == 422


def test_update_unknown_question(client, template_id) -> None:
    resp = _save(client, template_id, "Name", QuestionType.SINGLE_LINE_TEXT, question_id="missing", sequence=1)
    assert resp.status_code == 404
    assert resp.json()["code"] == "NOT_FOUND"


def test_questions_of_unknown_template(client) -> None:
    assert client.get(f"{API}/templates/missing/questions").status_code == 404


def test_delete_unknown_question(client, template_id) -> None:
    resp = client.delete(f"{API}/questions/missing")
    assert resp.status_code == 404


def test_question_sequences(client, template_id) -> None:
    ids = [_save(client, template_id, f"Q{i}", QuestionType.DATE).json()["question_id"] for i in range(1, 4)]
    listed = client.get(f"{API}/templates/{template_id}/questions").json()
    reordered = [listed[1], listed[2], listed[0]]
    for pos, q in enumerate(reordered, start=1):
        q["sequence_number"] = pos
    resp = client.put(f"{API}/question-sequences", json={"questions": reordered})
    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "count": 3}
    listed = client.get(f"{API}/templates/{template_id}/questions").json()
    assert [q["question_id"] for q in listed] == [ids[1], ids[2], ids[0]]


def test_instance_lifecycle_and_responses(client, template_id) -> None:
    qid_text = _save(client, template_id, "Name", QuestionType.SINGLE_LINE_TEXT).json()["question_id"]
    qid_tags = _save(
        client,
        template_id,
        "Tags",
        QuestionType.CHECKBOXES,
        options=[{"value": "A"}, {"value": "B"}, {"value": "C"}],
    ).json()["question_id"]

    created = client.post(
        f"{API}/records/rec-1/instances",
        json={"object_api_name": RECORD["object_api_name"], "field_api_name": RECORD["field_api_name"]},
    )
    assert created.status_code == 201
    instance = created.json()
    assert instance["template_id"] == template_id
    assert instance["name"] == "Assessment 1"

    listed = client.get(f"{API}/records/rec-1/instances").json()
    assert [i["instance_id"] for i in listed] == [instance["instance_id"]]

    iid = instance["instance_id"]
    saved = client.post(
        f"{API}/instances/{iid}/responses",
        json={
            "responses": [
                {"question_id": qid_text, "raw_value": "Hello", "record_id": "rec-1", "object_api_name": "Account"},
                {"question_id": qid_tags, "raw_value": "A;C", "record_id": "rec-1", "object_api_name": "Account"},
            ]
        },
    )
    assert saved.status_code == 200
    assert saved.json()["count"] == 2

    loaded = client.get(f"{API}/instances/{iid}/questions-and-responses").json()
    assert [q["question_id"] for q in loaded["questions"]] == [qid_text, qid_tags]
    assert loaded["responses"] == {qid_text: "Hello", qid_tags: "A;C"}

    # answers are upserted per question
    client.post(
        f"{API}/instances/{iid}/responses",
        json={"responses": [{"question_id": qid_tags, "raw_value": "B"}]},
    )
    loaded = client.get(f"{API}/instances/{iid}/questions-and-responses").json()
    assert loaded["responses"][qid_tags] == "B"


def test_create_instance_without_template(client) -> None:
    resp = client.post(
        f"{API}/records/orphan/instances",
        json={"object_api_name": "Account", "field_api_name": "Assessment_Template__c"},
    )
    assert resp.status_code == 404
    assert resp.json()["message"] == "No assessment template is associated with this record."


def test_unknown_instance(client) -> None:
    assert client.get(f"{API}/instances/missing/questions-and-responses").status_code == 404
    resp = client.post(f"{API}/instances/missing/responses", json={"responses": []})
    assert resp.status_code == 404


def test_response_for_unknown_question(client, template_id) -> None:
    iid = client.post(
        f"{API}/records/rec-1/instances",
        json={"object_api_name": RECORD["object_api_name"], "field_api_name": RECORD["field_api_name"]},
    ).json()["instance_id"]
    resp = client.post(f"{API}/instances/{iid}/responses", json={"responses": [{"question_id": "ghost", "raw_value": "x"}]})
    assert resp.status_code == 422
    assert resp.json()["message"] == "Response references an unknown question."


def test_instances_are_listed_newest_first(client, template_id) -> None:
    for _ in range(12):
        resp = client.post(
            f"{API}/records/rec-1/instances",
            json={"object_api_name": RECORD["object_api_name"], "field_api_name": RECORD["field_api_name"]},
        )
        assert resp.status_code == 201
    listed = client.get(f"{API}/records/rec-1/instances").json()
    assert [i["name"] for i in listed] == [f"Assessment {n}" for n in range(12, 0, -1)]


def test_question_sequence_must_be_positive(client, template_id) -> None:
    resp = _save(client, template_id, "Name", QuestionType.SINGLE_LINE_TEXT, sequence=0)
    assert resp.status_code == 422
    assert resp.json()["code"] == "REQUEST_INVALID"


def test_question_with_explicit_sequence_keeps_it(client, template_id) -> None:
    _save(client, template_id, "First", QuestionType.SINGLE_LINE_TEXT)
    _save(client, template_id, "Later", QuestionType.SINGLE_LINE_TEXT, sequence=5)
    _save(client, template_id, "Appended", QuestionType.SINGLE_LINE_TEXT)
    listed = client.get(f"{API}/templates/{template_id}/questions").json()
    assert [(q["question_text"], q["sequence_number"]) for q in listed] == [
        ("First", 1),
        ("Later", 5),
        ("Appended", 6),
    ]
    later = listed[1]
    _save(client, template_id, "Later, renamed", QuestionType.SINGLE_LINE_TEXT, question_id=later["question_id"])
    listed = client.get(f"{API}/templates/{template_id}/questions").json()
    assert [(q["question_text"], q["sequence_number"]) for q in listed][1] == ("Later, renamed", 5)
