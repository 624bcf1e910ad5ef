"""Pydantic models for the assessment document.

The document is immutable: models are frozen and every collection is a
tuple, so update helpers in `talentflow/logic/assessment_document.py` always
return new values. Python attributes are snake_case; the wire format is
camelCase (``jobId``, ``minLength``, ``conditionalLogic.dependsOn``).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from talentflow.models.question_kind import QuestionKind


class DocumentModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> Dict[str, Any]:
        """Return the camelCase JSON-ready representation, omitting unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class QuestionValidation(DocumentModel):
    min_length: int | None = Field(default=None, ge=0)
    max_length: int | None = Field(default=None, ge=0)
    min: int | float | None = None
    max: int | float | None = None


class ConditionalLogic(DocumentModel):
    depends_on: str
    # A single value matches by strict equality, a list by membership
    show_when: str | tuple[str, ...]


class Question(DocumentModel):
    id: str
    type: QuestionKind = QuestionKind.SHORT_TEXT
    title: str = ""
    description: str | None = None
    required: bool = False
    order: int = 0
    options: tuple[str, ...] | None = None
    validation: QuestionValidation | None = None
    conditional_logic: ConditionalLogic | None = None


class Section(DocumentModel):
    id: str
    title: str = ""
    description: str | None = None
    order: int = 0
    questions: tuple[Question, ...] = ()


class Assessment(DocumentModel):
    """An assessment document; ``id`` is empty until the first save."""

    id: str = ""
    job_id: str
    title: str = ""
    description: str | None = None
    sections: tuple[Section, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AssessmentResponse(DocumentModel):
    id: str
    assessment_id: str
    candidate_id: str | None = None
    responses: Dict[str, Any]
    completed_at: datetime | None = None
    created_at: datetime


__all__ = [
    "DocumentModel",
    "QuestionValidation",
    "ConditionalLogic",
    "Question",
    "Section",
    "Assessment",
    "AssessmentResponse",
]
