"""Functional API contract tests over the in-process FastAPI app.

Exercises load/save, builder operations, preview sessions, direct submission,
problem+json error shapes, ETag emission and the request-id echo.
"""

from __future__ import annotations

import copy

import jsonschema
import pytest

from talentflow.logic.errors import SaveFailedError
from talentflow.logic.repository_jobs import create_job
from talentflow.models.assessment import Assessment

BASE = "/api/v1"


def _assert_problem(resp, status: int, code: str) -> dict:
    assert resp.status_code == status, resp.text
    assert resp.headers["content-type"].startswith("application/problem+json")
    body = resp.json()
    assert body["status"] == status
    assert body["code"] == code
    assert body["title"]
    return body


def _put_sample(client, body: dict, job_id: str = "job_1"):
    resp = client.put(f"{BASE}/assessments/{job_id}", json=body)
    assert resp.status_code == 200, resp.text
    return resp


# Load / save


def test_put_then_get_round_trip_with_etags(client, sample_body):
    put = _put_sample(client, sample_body)
    saved = put.json()
    assert saved["jobId"] == "job_1"
    assert saved["id"].startswith("assessment_")
    assert put.headers["ETag"].startswith('W/"')
    assert put.headers["Assessment-ETag"] == put.headers["ETag"]
    assert "Assessment-ETag" in put.headers["Access-Control-Expose-Headers"]

    got = client.get(f"{BASE}/assessments/job_1")
    assert got.status_code == 200
    assert got.json() == saved
    assert got.headers["ETag"] == put.headers["ETag"]


def test_resave_keeps_identity_and_changes_etag(client, sample_body):
    first = _put_sample(client, sample_body)
    sample_body["title"] = "Second version"
    second = _put_sample(client, sample_body)
    assert second.json()["id"] == first.json()["id"]
    assert second.json()["createdAt"] == first.json()["createdAt"]
    assert second.headers["ETag"] != first.headers["ETag"]


def test_get_missing_assessment_is_problem_json(client):
    _assert_problem(client.get(f"{BASE}/assessments/job_missing"), 404, "assessment_not_found")


def test_saved_document_matches_json_schema(client, sample_body):
    _put_sample(client, sample_body)
    schema = Assessment.model_json_schema(by_alias=True, mode="serialization")
    jsonschema.validate(client.get(f"{BASE}/assessments/job_1").json(), schema)


def test_draft_for_job_without_assessment(client):
    create_job("Data Scientist")
    resp = client.get(f"{BASE}/assessments/job_1/draft")
    assert resp.status_code == 200
    body = resp.json()
    assert body["title"] == "Data Scientist Assessment"
    assert body["description"] == "Technical assessment for Data Scientist position"
    assert body["sections"] == []
    assert "ETag" not in resp.headers
    _assert_problem(client.get(f"{BASE}/assessments/job_404/draft"), 404, "job_not_found")


def test_draft_returns_saved_assessment_when_present(client, sample_body):
    saved = _put_sample(client, sample_body).json()
    assert client.get(f"{BASE}/assessments/job_1/draft").json() == saved


def test_forward_dependency_rejected_on_save(client, sample_body):
    body = copy.deepcopy(sample_body)
    body["sections"][0]["questions"][0]["conditionalLogic"] = {"dependsOn": "q_remote", "showWhen": "Yes"}
    problem = _assert_problem(client.put(f"{BASE}/assessments/job_1", json=body), 422, "invalid_dependency")
    assert problem["errors"] == [{"questionId": "q_years", "dependsOn": "q_remote", "code": "forward_dependency"}]
    _assert_problem(client.get(f"{BASE}/assessments/job_1"), 404, "assessment_not_found")


def test_self_dependency_rejected_but_missing_target_saved(client, sample_body):
    body = copy.deepcopy(sample_body)
    body["sections"][1]["questions"][1]["conditionalLogic"] = {"dependsOn": "q_reason", "showWhen": "Yes"}
    problem = _assert_problem(client.put(f"{BASE}/assessments/job_1", json=body), 422, "invalid_dependency")
    assert problem["errors"][0]["code"] == "self_dependency"

    body["sections"][1]["questions"][1]["conditionalLogic"] = {"dependsOn": "q_gone", "showWhen": "Yes"}
    _put_sample(client, body)


def test_duplicate_ids_rejected(client, sample_body):
    body = copy.deepcopy(sample_body)
    body["sections"][1]["id"] = "s_skills"
    body["sections"][1]["questions"][2]["id"] = "q_years"
    problem = _assert_problem(client.put(f"{BASE}/assessments/job_1", json=body), 422, "duplicate_identity")
    assert problem["errors"] == [{"kind": "section", "id": "s_skills"}, {"kind": "question", "id": "q_years"}]
    _assert_problem(client.get(f"{BASE}/assessments/job_1"), 404, "assessment_not_found")
    _assert_problem(
        client.post(f"{BASE}/assessments/job_1/preview-sessions", json={"document": body}),
        422,
        "duplicate_identity",
    )


def test_deleting_a_controlling_question_hides_its_dependent(client, sample_body):
    _put_sample(client, sample_body)
    resp = client.delete(f"{BASE}/assessments/job_1/sections/s_background/questions/q_remote")
    assert resp.status_code == 200, resp.text
    remaining = resp.json()["sections"][1]["questions"]
    assert [q["id"] for q in remaining] == ["q_reason", "q_salary"]
    assert remaining[0]["conditionalLogic"]["dependsOn"] == "q_remote"

    view = _open_session(client)
    assert view["visibleQuestionIds"] == ["q_years", "q_stack", "q_salary"]


def test_save_failure_maps_to_503(client, sample_body, mocker):
    mocker.patch(
        "talentflow.routes.assessments.save_assessment",
        side_effect=SaveFailedError("could not save assessment for job job_1"),
    )
    _assert_problem(client.put(f"{BASE}/assessments/job_1", json=sample_body), 503, "save_failed")


def test_invalid_body_is_request_validation_problem(client):
    resp = client.put(f"{BASE}/assessments/job_1", json={"sections": "nope"})
    body = _assert_problem(resp, 422, "request_invalid")
    assert body["errors"]


def test_list_assessments_summaries(client, sample_body):
    create_job("Backend Engineer")
    _put_sample(client, sample_body)
    rows = client.get(f"{BASE}/assessments").json()
    assert rows == [
        {
            "assessmentId": rows[0]["assessmentId"],
            "jobId": "job_1",
            "jobTitle": "Backend Engineer",
            "title": sample_body["title"],
            "sectionCount": 2,
            "questionCount": 5,
            "updatedAt": rows[0]["updatedAt"],
        }
    ]


# Builder operations


def test_builder_operations_on_a_draft(client):
    create_job("QA Engineer")
    resp = client.post(f"{BASE}/assessments/job_1/sections", json={"title": "Basics"})
    assert resp.status_code == 201, resp.text
    section_id = resp.json()["section"]["id"]
    assert resp.json()["section"]["order"] == 1
    assert resp.json()["assessment"]["title"] == "QA Engineer Assessment"

    first = client.post(
        f"{BASE}/assessments/job_1/sections/{section_id}/questions",
        json={"type": "numeric", "title": "Years?", "validation": {"min": 0}},
    ).json()["question"]
    second = client.post(f"{BASE}/assessments/job_1/sections/{section_id}/questions", json={}).json()["question"]
    assert (first["order"], second["order"]) == (1, 2)
    assert second["title"] == "New Question" and second["type"] == "short-text"

    patched = client.patch(
        f"{BASE}/assessments/job_1/sections/{section_id}/questions/{second['id']}",
        json={"required": True, "id": "ignored"},
    )
    assert patched.status_code == 200
    assert patched.headers["ETag"]

    moved = client.post(
        f"{BASE}/assessments/job_1/sections/{section_id}/questions/reorder",
        json={"fromIndex": 1, "toIndex": 0},
    ).json()
    questions = moved["sections"][0]["questions"]
    assert [q["id"] for q in questions] == [second["id"], first["id"]]
    assert [q["order"] for q in questions] == [1, 2]
    assert questions[0]["required"] is True

    renamed = client.patch(f"{BASE}/assessments/job_1/sections/{section_id}", json={"title": "Renamed"}).json()
    assert renamed["sections"][0]["title"] == "Renamed"

    remaining = client.delete(f"{BASE}/assessments/job_1/sections/{section_id}/questions/{first['id']}").json()
    assert [q["order"] for q in remaining["sections"][0]["questions"]] == [1]

    emptied = client.delete(f"{BASE}/assessments/job_1/sections/{section_id}").json()
    assert emptied["sections"] == []


def test_builder_reorder_sections(client, sample_body):
    _put_sample(client, sample_body)
    body = client.post(f"{BASE}/assessments/job_1/sections/reorder", json={"fromIndex": 1, "toIndex": 0}).json()
    assert [(s["id"], s["order"]) for s in body["sections"]] == [("s_background", 1), ("s_skills", 2)]


def test_builder_errors_are_problem_json(client, sample_body):
    _put_sample(client, sample_body)
    _assert_problem(
        client.patch(f"{BASE}/assessments/job_1/sections/s_nope", json={"title": "x"}),
        404,
        "section_not_found",
    )
    _assert_problem(
        client.delete(f"{BASE}/assessments/job_1/sections/s_skills/questions/q_nope"),
        404,
        "question_not_found",
    )
    _assert_problem(
        client.post(f"{BASE}/assessments/job_1/sections/reorder", json={"fromIndex": 5, "toIndex": 0}),
        422,
        "index_out_of_range",
    )
    _assert_problem(
        client.patch(f"{BASE}/assessments/job_1/sections/s_skills/questions/q_years", json={"title": None}),
        422,
        "patch_invalid",
    )
    _assert_problem(
        client.post(f"{BASE}/assessments/job_404/sections", json={}),
        404,
        "job_not_found",
    )


# Preview sessions


def _open_session(client, job_id: str = "job_1", **body) -> dict:
    resp = client.post(f"{BASE}/assessments/{job_id}/preview-sessions", json=body or None)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_preview_flow_persists_on_submit(client, sample_body):
    _put_sample(client, sample_body)
    view = _open_session(client, candidateId="candidate_3")
    sid = view["sessionId"]
    assert view["state"] == "editing"
    assert view["visibleQuestionCount"] == 4

    saved = client.put(f"{BASE}/preview-sessions/{sid}/responses/q_remote", json={"value": "Yes"}).json()
    assert saved == {
        "saved": True,
        "visibilityDelta": {"nowVisible": ["q_reason"], "nowHidden": [], "suppressedAnswers": []},
    }
    client.put(f"{BASE}/preview-sessions/{sid}/responses/q_years", json={"value": "5+ years"})
    toggled = client.post(f"{BASE}/preview-sessions/{sid}/responses/q_stack/toggle", json={"option": "Go"}).json()
    assert toggled["responses"]["q_stack"] == ["Go"]
    client.put(f"{BASE}/preview-sessions/{sid}/responses/q_reason", json={"value": "abcd"})

    rejected = client.post(f"{BASE}/preview-sessions/{sid}/submit")
    assert rejected.status_code == 200
    assert rejected.json()["submitted"] is False
    assert rejected.json()["errors"] == {
        "q_reason": {"questionId": "q_reason", "code": "too_short", "message": "Minimum 5 characters required"}
    }

    client.put(f"{BASE}/preview-sessions/{sid}/responses/q_reason", json={"value": "abcde"})
    accepted = client.post(f"{BASE}/preview-sessions/{sid}/submit").json()
    assert accepted["state"] == "submitted" and accepted["submitted"] is True
    assert accepted["responseId"].startswith("response_")

    again = client.post(f"{BASE}/preview-sessions/{sid}/submit").json()
    assert again["responseId"] == accepted["responseId"]

    stored = client.get(f"{BASE}/assessments/job_1/responses").json()
    assert len(stored) == 1
    assert stored[0]["candidateId"] == "candidate_3"
    assert stored[0]["responses"]["q_stack"] == ["Go"]

    _assert_problem(
        client.put(f"{BASE}/preview-sessions/{sid}/responses/q_years", json={"value": "0-1 years"}),
        409,
        "session_closed",
    )


def test_preview_of_unsaved_document_stores_nothing(client, sample_body):
    body = copy.deepcopy(sample_body)
    body["sections"] = body["sections"][:1]
    view = _open_session(client, "job_9", document=body)
    assert view["assessmentId"] is None
    sid = view["sessionId"]
    client.put(f"{BASE}/preview-sessions/{sid}/responses/q_years", json={"value": "1-3 years"})
    client.post(f"{BASE}/preview-sessions/{sid}/responses/q_stack/toggle", json={"option": "Rust"})
    assert client.post(f"{BASE}/preview-sessions/{sid}/submit").json()["submitted"] is True
    _assert_problem(client.get(f"{BASE}/assessments/job_9/responses"), 404, "assessment_not_found")


def test_preview_session_errors(client, sample_body):
    _assert_problem(client.post(f"{BASE}/assessments/job_1/preview-sessions"), 404, "assessment_not_found")
    _put_sample(client, sample_body)
    sid = _open_session(client)["sessionId"]
    _assert_problem(
        client.put(f"{BASE}/preview-sessions/{sid}/responses/q_nope", json={"value": "x"}),
        404,
        "question_not_found",
    )
    _assert_problem(
        client.post(f"{BASE}/preview-sessions/{sid}/responses/q_years/toggle", json={"option": "x"}),
        422,
        "not_multi_choice",
    )
    assert client.delete(f"{BASE}/preview-sessions/{sid}").status_code == 204
    _assert_problem(client.get(f"{BASE}/preview-sessions/{sid}"), 404, "preview_session_not_found")
    _assert_problem(client.delete(f"{BASE}/preview-sessions/{sid}"), 404, "preview_session_not_found")


def test_preview_session_store_is_bounded(client, sample_body, monkeypatch):
    _put_sample(client, sample_body)
    monkeypatch.setattr(client.app.state.config.assessment, "max_preview_sessions", 2)
    first = _open_session(client)["sessionId"]
    _open_session(client)
    _open_session(client)
    _assert_problem(client.get(f"{BASE}/preview-sessions/{first}"), 404, "preview_session_not_found")


# Direct submission


def test_direct_submission_validates_then_stores(client, sample_body):
    _put_sample(client, sample_body)
    answers = {"q_years": "1-3 years", "q_stack": ["Python"], "q_remote": "Yes", "q_salary": "20"}
    problem = _assert_problem(
        client.post(f"{BASE}/assessments/job_1/submit", json={"responses": answers}),
        422,
        "submission_invalid",
    )
    assert set(problem["errors"]) == {"q_reason", "q_salary"}
    assert problem["errors"]["q_salary"]["code"] == "below_min"

    answers.update({"q_reason": "Great team", "q_salary": "120", "q_unknown": "ignored"})
    resp = client.post(f"{BASE}/assessments/job_1/submit", json={"candidateId": "candidate_1", "responses": answers})
    assert resp.status_code == 201, resp.text
    assert resp.json()["submitted"] is True
    stored = client.get(f"{BASE}/assessments/job_1/responses").json()
    assert stored[0]["responses"] == {
        "q_years": "1-3 years",
        "q_stack": ["Python"],
        "q_remote": "Yes",
        "q_salary": "120",
        "q_reason": "Great team",
    }


def test_direct_submission_store_failure_is_503(client, sample_body, mocker):
    _put_sample(client, sample_body)
    mocker.patch(
        "talentflow.routes.assessments.submit_responses",
        side_effect=SaveFailedError("could not store responses"),
    )
    answers = {"q_years": "1-3 years", "q_stack": ["Python"], "q_remote": "No"}
    _assert_problem(client.post(f"{BASE}/assessments/job_1/submit", json={"responses": answers}), 503, "save_failed")


# Ambient surface


def test_health_reports_database(client):
    assert client.get("/health").json() == {"status": "ok", "db": True}


@pytest.mark.parametrize("incoming", [None, "req-123"])
def test_request_id_header(client, incoming):
    headers = {"X-Request-Id": incoming} if incoming else {}
    resp = client.get("/health", headers=headers)
    if incoming:
        assert resp.headers["X-Request-Id"] == incoming
    else:
        assert resp.headers["X-Request-Id"]
