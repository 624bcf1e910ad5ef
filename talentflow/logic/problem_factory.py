"""Centralised construction of problem+json payloads.

Route modules raise ``HTTPException(status, detail=problem_...())`` with the
dicts built here instead of embedding titles and codes inline; the global
handler in `talentflow.http.problem` renders them as
``application/problem+json``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Mapping

from fastapi.encoders import jsonable_encoder

from talentflow.logic.errors import DocumentError
from talentflow.logic.validation import ValidationError
from talentflow.logic.visibility_rules import DependencyIssue
from talentflow.models.response_types import FieldError

logger = logging.getLogger(__name__)


def _problem(title: str, status: int, detail: str, code: str, **extra: Any) -> Dict[str, Any]:
    problem: Dict[str, Any] = {
        "title": title,
        "status": status,
        "detail": detail,
        "message": detail,
        "code": code,
    }
    problem.update(extra)
    logger.info("error_handler.handle code=%s status=%s", code, status)
    return problem


def problem_job_not_found(job_id: str) -> Dict[str, Any]:
    return _problem("Not Found", 404, f"job {job_id} does not exist", "job_not_found")


def problem_assessment_not_found(job_id: str) -> Dict[str, Any]:
    return _problem("Not Found", 404, f"no assessment saved for job {job_id}", "assessment_not_found")


def problem_preview_session_not_found(session_id: str) -> Dict[str, Any]:
    return _problem("Not Found", 404, f"preview session {session_id} does not exist", "preview_session_not_found")


def problem_document_error(exc: DocumentError) -> Dict[str, Any]:
    """Map a document operation error: unknown ids are 404, bad indexes 422."""
    status = 422 if exc.code == "index_out_of_range" else 404
    title = "Invalid Request" if status == 422 else "Not Found"
    return _problem(title, status, str(exc), exc.code)


def problem_invalid_dependencies(issues: Iterable[DependencyIssue]) -> Dict[str, Any]:
    errors = [
        {"questionId": issue.question_id, "dependsOn": issue.depends_on, "code": issue.code}
        for issue in issues
    ]
    return _problem(
        "Invalid Request",
        422,
        "conditional logic must depend on an earlier question",
        "invalid_dependency",
        errors=errors,
    )


def problem_duplicate_identity(duplicates: Mapping[str, Iterable[str]]) -> Dict[str, Any]:
    errors = [
        {"kind": kind.rstrip("s"), "id": identity}
        for kind, identities in duplicates.items()
        for identity in identities
    ]
    return _problem(
        "Invalid Request",
        422,
        "section and question ids must be unique within an assessment",
        "duplicate_identity",
        errors=errors,
    )


def problem_patch_invalid(errors: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    return _problem(
        "Invalid Request",
        422,
        "the change would produce an invalid document",
        "patch_invalid",
        errors=jsonable_encoder(list(errors)),
    )


def problem_not_multi_choice(question_id: str) -> Dict[str, Any]:
    return _problem(
        "Invalid Request",
        422,
        f"question {question_id} is not multi-choice",
        "not_multi_choice",
    )


def problem_session_closed(session_id: str) -> Dict[str, Any]:
    return _problem("Conflict", 409, f"preview session {session_id} is already submitted", "session_closed")


def problem_save_failed(detail: str) -> Dict[str, Any]:
    return _problem("Service Unavailable", 503, detail, "save_failed")


def problem_submission_invalid(errors: Mapping[str, ValidationError]) -> Dict[str, Any]:
    return _problem(
        "Invalid Request",
        422,
        "one or more visible questions failed validation",
        "submission_invalid",
        errors={qid: FieldError(**err.as_dict()).model_dump(by_alias=True) for qid, err in errors.items()},
    )


__all__ = [
    "problem_job_not_found",
    "problem_assessment_not_found",
    "problem_preview_session_not_found",
    "problem_document_error",
    "problem_invalid_dependencies",
    "problem_duplicate_identity",
    "problem_patch_invalid",
    "problem_not_multi_choice",
    "problem_session_closed",
    "problem_save_failed",
    "problem_submission_invalid",
]
