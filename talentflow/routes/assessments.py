"""Assessment load/save, listing and direct submission endpoints.

Implements:
- GET /assessments
- GET, PUT /assessments/{job_id}
- GET /assessments/{job_id}/draft
- POST /assessments/{job_id}/submit
- GET /assessments/{job_id}/responses
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request, Response

from talentflow.config import config_from_request
from talentflow.logic.assessment_document import duplicate_ids, find_question, new_assessment
from talentflow.logic.errors import SaveFailedError
from talentflow.logic.etag import compute_assessment_etag
from talentflow.logic.header_emitter import emit_etag_headers
from talentflow.logic.preview import PreviewSession
from talentflow.logic.problem_factory import (
    problem_assessment_not_found,
    problem_duplicate_identity,
    problem_invalid_dependencies,
    problem_job_not_found,
    problem_save_failed,
    problem_submission_invalid,
)
from talentflow.logic.repository_assessments import list_assessments, load_assessment, save_assessment
from talentflow.logic.repository_jobs import get_job
from talentflow.logic.repository_responses import list_responses, submit_responses
from talentflow.logic.visibility_rules import BLOCKING_DEPENDENCY_CODES, check_dependencies
from talentflow.models.assessment import Assessment
from talentflow.models.payloads import AssessmentPayload, SubmitPayload
from talentflow.models.response_types import SubmitResult

router = APIRouter()
logger = logging.getLogger(__name__)


def _document_body(doc: Assessment, response: Response) -> dict:
    emit_etag_headers(response, scope="assessment", token=compute_assessment_etag(doc))
    return doc.to_wire()


def _require_assessment(job_id: str) -> Assessment:
    doc = load_assessment(job_id)
    if doc is None:
        raise HTTPException(status_code=404, detail=problem_assessment_not_found(job_id))
    return doc


def load_or_draft(job_id: str) -> Assessment:
    """Return the saved assessment, or an unsaved draft titled after the job."""
    doc = load_assessment(job_id)
    if doc is not None:
        return doc
    job = get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail=problem_job_not_found(job_id))
    return new_assessment(
        job_id,
        title=f"{job.title} Assessment",
        description=f"Technical assessment for {job.title} position",
    )


def require_unique_ids(doc: Assessment) -> None:
    duplicates = duplicate_ids(doc)
    if duplicates["sections"] or duplicates["questions"]:
        raise HTTPException(status_code=422, detail=problem_duplicate_identity(duplicates))


def persist_document(request: Request, doc: Assessment) -> Assessment:
    """Save ``doc`` for its job after the id and dependency checks; map failures to problems.

    Only self and forward edges block a save. A reference to a question that
    no longer exists is kept and hides the dependent question.
    """
    require_unique_ids(doc)
    if not config_from_request(request).assessment.allow_forward_dependencies:
        issues = [i for i in check_dependencies(doc) if i.code in BLOCKING_DEPENDENCY_CODES]
        if issues:
            raise HTTPException(status_code=422, detail=problem_invalid_dependencies(issues))
    try:
        return save_assessment(
            doc.job_id,
            {"title": doc.title, "description": doc.description, "sections": [s.to_wire() for s in doc.sections]},
        )
    except SaveFailedError as exc:
        raise HTTPException(status_code=503, detail=problem_save_failed(str(exc))) from exc


@router.get("/assessments", summary="List saved assessments")
def get_assessments() -> list[dict]:
    return [s.model_dump(mode="json", by_alias=True) for s in list_assessments()]


@router.get("/assessments/{job_id}", summary="Load the saved assessment for a job")
def get_assessment(job_id: str, response: Response) -> dict:
    return _document_body(_require_assessment(job_id), response)


@router.get("/assessments/{job_id}/draft", summary="Load the saved assessment or a new draft")
def get_assessment_draft(job_id: str, response: Response) -> dict:
    doc = load_or_draft(job_id)
    if not doc.id:
        # Unsaved drafts carry no ETag
        return doc.to_wire()
    return _document_body(doc, response)


@router.put("/assessments/{job_id}", summary="Save (upsert) the assessment for a job")
def put_assessment(job_id: str, payload: AssessmentPayload, request: Request, response: Response) -> dict:
    doc = Assessment(
        job_id=job_id,
        title=payload.title,
        description=payload.description,
        sections=payload.sections,
    )
    saved = persist_document(request, doc)
    return _document_body(saved, response)


@router.post("/assessments/{job_id}/submit", status_code=201, summary="Validate and store a complete response map")
def submit_assessment(job_id: str, payload: SubmitPayload) -> dict:
    """Validate every visible question server-side, then persist the responses.

    Keys that name no question in the assessment are ignored.
    """
    doc = _require_assessment(job_id)
    session = PreviewSession(
        doc,
        on_submit=lambda responses: submit_responses(doc.id, responses, payload.candidate_id),
    )
    for question_id, value in payload.responses.items():
        if find_question(doc, question_id) is None:
            logger.warning("submit_unknown_question_ignored job_id=%s question_id=%s", job_id, question_id)
            continue
        session.update_response(question_id, value)
    try:
        report = session.submit()
    except SaveFailedError as exc:
        raise HTTPException(status_code=503, detail=problem_save_failed(str(exc))) from exc
    if not report.submitted:
        raise HTTPException(status_code=422, detail=problem_submission_invalid(report.errors))
    result = SubmitResult(
        state=report.state.value,
        submitted=True,
        errors={},
        response_id=session.receipt.id,
    )
    return result.model_dump(mode="json", by_alias=True)


@router.get("/assessments/{job_id}/responses", summary="List stored responses for a job's assessment")
def get_assessment_responses(job_id: str) -> list[dict]:
    doc = _require_assessment(job_id)
    return [r.to_wire() for r in list_responses(doc.id)]


__all__ = ["router", "load_or_draft", "persist_document", "require_unique_ids"]
