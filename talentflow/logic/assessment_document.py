"""Immutable update operations over the assessment document.

Every operation takes an ``Assessment`` and returns a new one; the input is
never modified, so callers can keep earlier values for undo history and
compare documents for change detection. Structural changes (add, delete,
reorder) always renumber ``order`` through
`talentflow.logic.order_sequences.reindex`.
"""

from __future__ import annotations

import logging
import uuid
from collections import Counter
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, TypeVar

from pydantic import BaseModel

from talentflow.logic.errors import QuestionNotFoundError, SectionNotFoundError
from talentflow.logic.order_sequences import move, reindex
from talentflow.models.assessment import Assessment, Question, Section

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

SECTION_PROTECTED = frozenset({"id", "order", "questions"})
QUESTION_PROTECTED = frozenset({"id", "order"})


def new_identity(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def new_assessment(job_id: str, title: str = "", description: str | None = None) -> Assessment:
    """Return an unsaved, empty assessment for ``job_id``."""
    return Assessment(job_id=job_id, title=title, description=description)


def _merge(model: ModelT, patch: Mapping[str, Any], protected: frozenset[str]) -> ModelT:
    """Merge ``patch`` into ``model`` and re-validate.

    Keys may be attribute names or camelCase wire names. Protected and
    unknown keys are ignored.
    """
    fields = type(model).model_fields
    by_wire_name = {(info.alias or name): name for name, info in fields.items()}
    data = model.model_dump()
    for key, value in patch.items():
        name = key if key in fields else by_wire_name.get(key)
        if name is None:
            logger.warning("document_patch_unknown_key model=%s key=%s", type(model).__name__, key)
            continue
        if name in protected:
            continue
        data[name] = value
    return type(model).model_validate(data)


def _with_sections(doc: Assessment, sections: Tuple[Section, ...]) -> Assessment:
    return doc.model_copy(update={"sections": reindex(sections)})


def _section_index(doc: Assessment, section_id: str) -> int:
    for idx, section in enumerate(doc.sections):
        if section.id == section_id:
            return idx
    raise SectionNotFoundError(section_id)


def _question_index(section: Section, question_id: str) -> int:
    for idx, question in enumerate(section.questions):
        if question.id == question_id:
            return idx
    raise QuestionNotFoundError(question_id)


def _replace_section(doc: Assessment, idx: int, section: Section) -> Assessment:
    sections = doc.sections[:idx] + (section,) + doc.sections[idx + 1:]
    return _with_sections(doc, sections)


def _with_questions(section: Section, questions: Tuple[Question, ...]) -> Section:
    return section.model_copy(update={"questions": reindex(questions)})


ASSESSMENT_PROTECTED = frozenset({"id", "job_id", "sections", "created_at", "updated_at"})


def update_details(doc: Assessment, patch: Mapping[str, Any]) -> Assessment:
    """Merge title/description changes into the assessment header."""
    return _merge(doc, patch, ASSESSMENT_PROTECTED)


# Sections


def add_section(doc: Assessment, *, section_id: Optional[str] = None, **fields: Any) -> Assessment:
    """Append a section; defaults mirror a fresh builder section ("New Section")."""
    base = Section(
        id=section_id or new_identity("section"),
        title="New Section",
        description="",
        order=len(doc.sections) + 1,
    )
    section = _merge(base, fields, SECTION_PROTECTED)
    return _with_sections(doc, doc.sections + (section,))


def update_section(doc: Assessment, section_id: str, patch: Mapping[str, Any]) -> Assessment:
    idx = _section_index(doc, section_id)
    return _replace_section(doc, idx, _merge(doc.sections[idx], patch, SECTION_PROTECTED))


def delete_section(doc: Assessment, section_id: str) -> Assessment:
    idx = _section_index(doc, section_id)
    return _with_sections(doc, doc.sections[:idx] + doc.sections[idx + 1:])


def reorder_sections(doc: Assessment, from_index: int, to_index: int) -> Assessment:
    return doc.model_copy(update={"sections": move(doc.sections, from_index, to_index)})


# Questions


def add_question(
    doc: Assessment,
    section_id: str,
    *,
    question_id: Optional[str] = None,
    **fields: Any,
) -> Assessment:
    """Append a question to a section; defaults to an optional short-text "New Question"."""
    idx = _section_index(doc, section_id)
    section = doc.sections[idx]
    base = Question(
        id=question_id or new_identity("question"),
        title="New Question",
        description="",
        order=len(section.questions) + 1,
    )
    question = _merge(base, fields, QUESTION_PROTECTED)
    return _replace_section(doc, idx, _with_questions(section, section.questions + (question,)))


def update_question(
    doc: Assessment,
    section_id: str,
    question_id: str,
    patch: Mapping[str, Any],
) -> Assessment:
    idx = _section_index(doc, section_id)
    section = doc.sections[idx]
    q_idx = _question_index(section, question_id)
    updated = _merge(section.questions[q_idx], patch, QUESTION_PROTECTED)
    questions = section.questions[:q_idx] + (updated,) + section.questions[q_idx + 1:]
    return _replace_section(doc, idx, _with_questions(section, questions))


def delete_question(doc: Assessment, section_id: str, question_id: str) -> Assessment:
    idx = _section_index(doc, section_id)
    section = doc.sections[idx]
    q_idx = _question_index(section, question_id)
    questions = section.questions[:q_idx] + section.questions[q_idx + 1:]
    return _replace_section(doc, idx, _with_questions(section, questions))


def reorder_questions(doc: Assessment, section_id: str, from_index: int, to_index: int) -> Assessment:
    idx = _section_index(doc, section_id)
    section = doc.sections[idx]
    reordered = section.model_copy(update={"questions": move(section.questions, from_index, to_index)})
    return _replace_section(doc, idx, reordered)


# Lookups


def iter_questions(doc: Assessment) -> Iterator[Question]:
    """Yield every question in document order (section position, then question position)."""
    for section in doc.sections:
        yield from section.questions


def find_question(doc: Assessment, question_id: str) -> Optional[Question]:
    for question in iter_questions(doc):
        if question.id == question_id:
            return question
    return None


def find_section_id(doc: Assessment, question_id: str) -> str:
    for section in doc.sections:
        if any(q.id == question_id for q in section.questions):
            return section.id
    raise QuestionNotFoundError(question_id)


def question_count(doc: Assessment) -> int:
    return sum(len(section.questions) for section in doc.sections)


def _repeated(ids: Iterable[str]) -> List[str]:
    return [identity for identity, count in Counter(ids).items() if count > 1]


def duplicate_ids(doc: Assessment) -> Dict[str, List[str]]:
    """Return section and question ids that occur more than once.

    Answers, lookups and the dependency check are keyed by id, so a document
    with repeated ids cannot be filled in reliably.
    """
    return {
        "sections": _repeated(s.id for s in doc.sections),
        "questions": _repeated(q.id for q in iter_questions(doc)),
    }


def normalize_order(doc: Assessment) -> Assessment:
    """Recompute every section and question order from position."""
    sections = tuple(_with_questions(s, s.questions) for s in doc.sections)
    return _with_sections(doc, sections)


__all__ = [
    "new_identity",
    "new_assessment",
    "update_details",
    "add_section",
    "update_section",
    "delete_section",
    "reorder_sections",
    "add_question",
    "update_question",
    "delete_question",
    "reorder_questions",
    "iter_questions",
    "find_question",
    "find_section_id",
    "question_count",
    "duplicate_ids",
    "normalize_order",
]
