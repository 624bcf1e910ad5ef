"""Preview/response session endpoints.

Sessions are held in process (`talentflow.logic.inmemory_state`). A session
opened over the stored assessment persists its responses on a successful
submit; a session over an unsaved builder document is a dry run and stores
nothing.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Body, HTTPException, Request, Response

from talentflow.config import config_from_request
from talentflow.logic.errors import QuestionNotFoundError, SaveFailedError, SessionClosedError
from talentflow.logic.inmemory_state import (
    PREVIEW_SESSION_JOBS,
    drop_preview_session,
    get_preview_session,
    register_preview_session,
)
from talentflow.logic.preview import PreviewSession
from talentflow.logic.problem_factory import (
    problem_assessment_not_found,
    problem_document_error,
    problem_not_multi_choice,
    problem_preview_session_not_found,
    problem_save_failed,
    problem_session_closed,
)
from talentflow.logic.repository_assessments import load_assessment
from talentflow.logic.repository_responses import submit_responses
from talentflow.models.assessment import Assessment
from talentflow.models.payloads import PreviewSessionCreate, ResponseValuePayload, ToggleOptionPayload
from talentflow.models.response_types import FieldError, PreviewSessionView, ResponseSaved, SubmitResult
from talentflow.routes.assessments import require_unique_ids

router = APIRouter()
logger = logging.getLogger(__name__)


def _session_view(session: PreviewSession) -> dict:
    view = PreviewSessionView(
        session_id=session.session_id,
        job_id=session.document.job_id,
        assessment_id=session.document.id or None,
        state=session.state.value,
        visible_question_ids=session.visible_question_ids(),
        visible_question_count=session.visible_question_count,
        responses=dict(session.responses),
        errors={qid: FieldError(**err.as_dict()) for qid, err in session.errors.items()},
    )
    return view.model_dump(mode="json", by_alias=True)


def _require_session(session_id: str) -> PreviewSession:
    session = get_preview_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=problem_preview_session_not_found(session_id))
    return session


@router.post("/assessments/{job_id}/preview-sessions", status_code=201, summary="Open a preview session")
def create_preview_session(
    job_id: str,
    request: Request,
    payload: Optional[PreviewSessionCreate] = Body(default=None),
) -> dict:
    payload = payload or PreviewSessionCreate()
    if payload.document is not None:
        document = Assessment(
            job_id=job_id,
            title=payload.document.title,
            description=payload.document.description,
            sections=payload.document.sections,
        )
        require_unique_ids(document)
        session = PreviewSession(document)
    else:
        stored = load_assessment(job_id)
        if stored is None:
            raise HTTPException(status_code=404, detail=problem_assessment_not_found(job_id))
        candidate_id = payload.candidate_id
        session = PreviewSession(
            stored,
            on_submit=lambda responses: submit_responses(stored.id, responses, candidate_id),
        )
    limit = config_from_request(request).assessment.max_preview_sessions
    register_preview_session(session, job_id, limit=limit)
    logger.info(
        "preview_session_opened session_id=%s job_id=%s dry_run=%s",
        session.session_id,
        job_id,
        payload.document is not None,
    )
    return _session_view(session)


@router.get("/preview-sessions/{session_id}", summary="Current preview state")
def get_preview(session_id: str) -> dict:
    return _session_view(_require_session(session_id))


@router.put("/preview-sessions/{session_id}/responses/{question_id}", summary="Store one answer")
def put_response(session_id: str, question_id: str, payload: ResponseValuePayload) -> dict:
    session = _require_session(session_id)
    try:
        delta = session.update_response(question_id, payload.value)
    except QuestionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=problem_document_error(exc)) from exc
    except SessionClosedError as exc:
        raise HTTPException(status_code=409, detail=problem_session_closed(session_id)) from exc
    return ResponseSaved(saved=True, visibility_delta=delta).model_dump(mode="json", by_alias=True)


@router.post("/preview-sessions/{session_id}/responses/{question_id}/toggle", summary="Toggle a multi-choice option")
def toggle_response_option(session_id: str, question_id: str, payload: ToggleOptionPayload) -> dict:
    session = _require_session(session_id)
    try:
        session.toggle_option(question_id, payload.option)
    except QuestionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=problem_document_error(exc)) from exc
    except SessionClosedError as exc:
        raise HTTPException(status_code=409, detail=problem_session_closed(session_id)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=problem_not_multi_choice(question_id)) from exc
    return _session_view(session)


@router.post("/preview-sessions/{session_id}/submit", summary="Validate visible questions and submit")
def submit_preview(session_id: str) -> dict:
    """Return the submit report; a rejected submit is still a 200 with the error map."""
    session = _require_session(session_id)
    try:
        report = session.submit()
    except SaveFailedError as exc:
        raise HTTPException(status_code=503, detail=problem_save_failed(str(exc))) from exc
    receipt = session.receipt
    result = SubmitResult(
        state=report.state.value,
        submitted=report.submitted,
        errors={qid: FieldError(**err.as_dict()) for qid, err in report.errors.items()},
        response_id=getattr(receipt, "id", None),
    )
    return result.model_dump(mode="json", by_alias=True)


@router.delete("/preview-sessions/{session_id}", status_code=204, summary="Discard a preview session")
def delete_preview(session_id: str) -> Response:
    job_id = PREVIEW_SESSION_JOBS.get(session_id)
    if not drop_preview_session(session_id):
        raise HTTPException(status_code=404, detail=problem_preview_session_not_found(session_id))
    logger.info("preview_session_closed session_id=%s job_id=%s", session_id, job_id)
    return Response(status_code=204)


__all__ = ["router"]
