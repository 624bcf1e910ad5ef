"""Pydantic models for assessment and preview response bodies."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ResponseModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VisibilityDelta(ResponseModel):
    now_visible: List[str]
    now_hidden: List[str]
    suppressed_answers: List[str]


class FieldError(ResponseModel):
    question_id: str
    code: str
    message: str


class PreviewSessionView(ResponseModel):
    session_id: str
    job_id: str
    assessment_id: str | None = None
    state: str
    visible_question_ids: List[str]
    visible_question_count: int
    responses: Dict[str, Any]
    errors: Dict[str, FieldError]


class ResponseSaved(ResponseModel):
    saved: bool
    visibility_delta: VisibilityDelta


class SubmitResult(ResponseModel):
    state: str
    submitted: bool
    errors: Dict[str, FieldError]
    response_id: str | None = None


class AssessmentSummary(ResponseModel):
    assessment_id: str
    job_id: str
    job_title: str | None = None
    title: str
    section_count: int
    question_count: int
    updated_at: datetime | None = None


__all__ = [
    "VisibilityDelta",
    "FieldError",
    "PreviewSessionView",
    "ResponseSaved",
    "SubmitResult",
    "AssessmentSummary",
]
