"""Builder session: in-memory authoring over one assessment document.

Holds the current document as session state, applies the immutable
operations from `talentflow.logic.assessment_document`, tracks which section
and question are expanded in the editor, and keeps undo/redo history. No
validation happens while building; an assessment without sections or
questions is a valid, savable document.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Mapping, Optional

from talentflow.logic import assessment_document as ops
from talentflow.logic.errors import SaveFailedError
from talentflow.models.assessment import Assessment, Question, Section

logger = logging.getLogger(__name__)

SaveFn = Callable[[str, Mapping[str, Any]], Assessment]


def document_payload(doc: Assessment) -> dict:
    """Return the ``{title, description, sections}`` body sent to the store."""
    return {
        "title": doc.title,
        "description": doc.description,
        "sections": [s.to_wire() for s in doc.sections],
    }


class BuilderSession:
    def __init__(self, document: Assessment, history_limit: int = 100) -> None:
        self._document = document
        self._baseline = document
        self._undo: List[Assessment] = []
        self._redo: List[Assessment] = []
        self._history_limit = history_limit
        self.expanded_section_id: Optional[str] = None
        self.expanded_question_id: Optional[str] = None

    @property
    def document(self) -> Assessment:
        return self._document

    @property
    def is_dirty(self) -> bool:
        """True when the document differs from the last loaded or saved version."""
        return self._document != self._baseline

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def _apply(self, document: Assessment) -> Assessment:
        if document == self._document:
            return document
        self._undo.append(self._document)
        if len(self._undo) > self._history_limit:
            del self._undo[0]
        self._redo.clear()
        self._document = document
        return document

    # Assessment header

    def update_details(self, patch: Mapping[str, Any]) -> Assessment:
        return self._apply(ops.update_details(self._document, patch))

    # Sections

    def add_section(self, **fields: Any) -> Section:
        doc = self._apply(ops.add_section(self._document, **fields))
        section = doc.sections[-1]
        self.expanded_section_id = section.id
        return section

    def update_section(self, section_id: str, patch: Mapping[str, Any]) -> Assessment:
        return self._apply(ops.update_section(self._document, section_id, patch))

    def delete_section(self, section_id: str) -> Assessment:
        removed = next((s for s in self._document.sections if s.id == section_id), None)
        doc = self._apply(ops.delete_section(self._document, section_id))
        if self.expanded_section_id == section_id:
            self.expanded_section_id = None
        if removed is not None and any(q.id == self.expanded_question_id for q in removed.questions):
            self.expanded_question_id = None
        return doc

    def reorder_sections(self, from_index: int, to_index: int) -> Assessment:
        return self._apply(ops.reorder_sections(self._document, from_index, to_index))

    # Questions

    def add_question(self, section_id: str, **fields: Any) -> Question:
        doc = self._apply(ops.add_question(self._document, section_id, **fields))
        section = next(s for s in doc.sections if s.id == section_id)
        question = section.questions[-1]
        self.expanded_question_id = question.id
        return question

    def update_question(self, section_id: str, question_id: str, patch: Mapping[str, Any]) -> Assessment:
        return self._apply(ops.update_question(self._document, section_id, question_id, patch))

    def delete_question(self, section_id: str, question_id: str) -> Assessment:
        doc = self._apply(ops.delete_question(self._document, section_id, question_id))
        if self.expanded_question_id == question_id:
            self.expanded_question_id = None
        return doc

    def reorder_questions(self, section_id: str, from_index: int, to_index: int) -> Assessment:
        return self._apply(ops.reorder_questions(self._document, section_id, from_index, to_index))

    # Editor state

    def toggle_section(self, section_id: str) -> Optional[str]:
        self.expanded_section_id = None if self.expanded_section_id == section_id else section_id
        return self.expanded_section_id

    def toggle_question(self, question_id: str) -> Optional[str]:
        self.expanded_question_id = None if self.expanded_question_id == question_id else question_id
        return self.expanded_question_id

    # History

    def undo(self) -> bool:
        if not self._undo:
            return False
        self._redo.append(self._document)
        self._document = self._undo.pop()
        return True

    def redo(self) -> bool:
        if not self._redo:
            return False
        self._undo.append(self._document)
        self._document = self._redo.pop()
        return True

    # Persistence

    def save(self, save_fn: SaveFn) -> Assessment:
        """Persist the current document through ``save_fn(job_id, payload)``.

        On success the stored document (with identity and timestamps)
        becomes both the current document and the clean baseline; history is
        kept. On ``SaveFailedError`` the session is left exactly as it was.
        """
        doc = self._document
        try:
            saved = save_fn(doc.job_id, document_payload(doc))
        except SaveFailedError:
            logger.error("builder_save_failed job_id=%s", doc.job_id, exc_info=True)
            raise
        self._document = saved
        self._baseline = saved
        logger.info("builder_saved job_id=%s assessment_id=%s", saved.job_id, saved.id)
        return saved


__all__ = ["BuilderSession", "document_payload"]
