"""Pydantic request payloads for assessment, authoring and preview routes.

Declared apart from the route modules so handlers only orchestrate. Patch
payloads are applied with ``exclude_unset`` so an explicit ``null`` clears a
field while an omitted key leaves it untouched.
"""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from talentflow.models.assessment import ConditionalLogic, QuestionValidation, Section
from talentflow.models.question_kind import QuestionKind


class PayloadModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def as_patch(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class AssessmentPayload(PayloadModel):
    title: str
    description: str | None = None
    sections: tuple[Section, ...] = ()


class SectionCreate(PayloadModel):
    title: str = "New Section"
    description: str | None = ""


class SectionPatch(PayloadModel):
    title: str | None = None
    description: str | None = None


class QuestionCreate(PayloadModel):
    type: QuestionKind = QuestionKind.SHORT_TEXT
    title: str = "New Question"
    description: str | None = ""
    required: bool = False
    options: tuple[str, ...] | None = None
    validation: QuestionValidation | None = None
    conditional_logic: ConditionalLogic | None = None


class QuestionPatch(PayloadModel):
    type: QuestionKind | None = None
    title: str | None = None
    description: str | None = None
    required: bool | None = None
    options: tuple[str, ...] | None = None
    validation: QuestionValidation | None = None
    conditional_logic: ConditionalLogic | None = None


class ReorderPayload(PayloadModel):
    from_index: int = Field(ge=0)
    to_index: int = Field(ge=0)


class ResponseValuePayload(PayloadModel):
    value: str | list[str] | int | float | None = None


class ToggleOptionPayload(PayloadModel):
    option: str


class PreviewSessionCreate(PayloadModel):
    candidate_id: str | None = None
    # Unsaved builder state to preview; the stored assessment is used when absent
    document: AssessmentPayload | None = None


class SubmitPayload(PayloadModel):
    candidate_id: str | None = None
    responses: Dict[str, Any] = Field(default_factory=dict)


__all__ = [
    "AssessmentPayload",
    "SectionCreate",
    "SectionPatch",
    "QuestionCreate",
    "QuestionPatch",
    "ReorderPayload",
    "ResponseValuePayload",
    "ToggleOptionPayload",
    "PreviewSessionCreate",
    "SubmitPayload",
]
