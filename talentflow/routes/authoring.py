"""Builder endpoints for sections and questions.

Each request opens a `BuilderSession` over the stored assessment (or the
job's draft when none is saved yet), applies one operation, and saves the
result through the same path as ``PUT /assessments/{job_id}``.
"""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from fastapi import APIRouter, HTTPException, Request, Response
from pydantic import ValidationError as PydanticValidationError

from talentflow.logic.builder import BuilderSession
from talentflow.logic.errors import DocumentError
from talentflow.logic.etag import compute_assessment_etag
from talentflow.logic.header_emitter import emit_etag_headers
from talentflow.logic.problem_factory import problem_document_error, problem_patch_invalid
from talentflow.models.assessment import Assessment
from talentflow.models.payloads import (
    QuestionCreate,
    QuestionPatch,
    ReorderPayload,
    SectionCreate,
    SectionPatch,
)
from talentflow.routes.assessments import load_or_draft, persist_document

router = APIRouter(prefix="/assessments/{job_id}")
logger = logging.getLogger(__name__)

T = TypeVar("T")


def _apply(job_id: str, operation: Callable[[BuilderSession], T]) -> tuple[BuilderSession, T]:
    session = BuilderSession(load_or_draft(job_id))
    try:
        result = operation(session)
    except DocumentError as exc:
        problem = problem_document_error(exc)
        raise HTTPException(status_code=problem["status"], detail=problem) from exc
    except PydanticValidationError as exc:
        raise HTTPException(status_code=422, detail=problem_patch_invalid(exc.errors(include_url=False, include_context=False))) from exc
    return session, result


def _saved_body(request: Request, response: Response, session: BuilderSession) -> Assessment:
    saved = persist_document(request, session.document)
    emit_etag_headers(response, scope="assessment", token=compute_assessment_etag(saved))
    logger.info("authoring_applied job_id=%s assessment_id=%s", saved.job_id, saved.id)
    return saved


# Sections


@router.post("/sections", status_code=201, summary="Append a section")
def create_section(job_id: str, payload: SectionCreate, request: Request, response: Response) -> dict:
    session, section = _apply(job_id, lambda s: s.add_section(**payload.as_patch()))
    saved = _saved_body(request, response, session)
    stored = next(s for s in saved.sections if s.id == section.id)
    return {"section": stored.to_wire(), "assessment": saved.to_wire()}


@router.patch("/sections/{section_id}", summary="Update a section's title or description")
def patch_section(job_id: str, section_id: str, payload: SectionPatch, request: Request, response: Response) -> dict:
    session, _ = _apply(job_id, lambda s: s.update_section(section_id, payload.as_patch()))
    return _saved_body(request, response, session).to_wire()


@router.delete("/sections/{section_id}", summary="Delete a section and its questions")
def remove_section(job_id: str, section_id: str, request: Request, response: Response) -> dict:
    session, _ = _apply(job_id, lambda s: s.delete_section(section_id))
    return _saved_body(request, response, session).to_wire()


@router.post("/sections/reorder", summary="Move a section to a new position")
def reorder_sections(job_id: str, payload: ReorderPayload, request: Request, response: Response) -> dict:
    session, _ = _apply(job_id, lambda s: s.reorder_sections(payload.from_index, payload.to_index))
    return _saved_body(request, response, session).to_wire()


# Questions


@router.post("/sections/{section_id}/questions", status_code=201, summary="Append a question to a section")
def create_question(job_id: str, section_id: str, payload: QuestionCreate, request: Request, response: Response) -> dict:
    session, question = _apply(job_id, lambda s: s.add_question(section_id, **payload.as_patch()))
    saved = _saved_body(request, response, session)
    section = next(s for s in saved.sections if s.id == section_id)
    stored = next(q for q in section.questions if q.id == question.id)
    return {"question": stored.to_wire(), "assessment": saved.to_wire()}


@router.patch("/sections/{section_id}/questions/{question_id}", summary="Update a question")
def patch_question(
    job_id: str,
    section_id: str,
    question_id: str,
    payload: QuestionPatch,
    request: Request,
    response: Response,
) -> dict:
    session, _ = _apply(job_id, lambda s: s.update_question(section_id, question_id, payload.as_patch()))
    return _saved_body(request, response, session).to_wire()


@router.delete("/sections/{section_id}/questions/{question_id}", summary="Delete a question")
def remove_question(job_id: str, section_id: str, question_id: str, request: Request, response: Response) -> dict:
    session, _ = _apply(job_id, lambda s: s.delete_question(section_id, question_id))
    return _saved_body(request, response, session).to_wire()


@router.post("/sections/{section_id}/questions/reorder", summary="Move a question within its section")
def reorder_questions(job_id: str, section_id: str, payload: ReorderPayload, request: Request, response: Response) -> dict:
    session, _ = _apply(
        job_id,
        lambda s: s.reorder_questions(section_id, payload.from_index, payload.to_index),
    )
    return _saved_body(request, response, session).to_wire()


__all__ = ["router"]
