"""Exception types raised by the assessment engine and its persistence boundary.

Response validation failures are not here: they are values returned by
`talentflow.logic.validation.validate`.
"""

from __future__ import annotations


class DocumentError(ValueError):
    """A document operation addressed something that does not exist."""

    code = "document_error"


class SectionNotFoundError(DocumentError):
    code = "section_not_found"

    def __init__(self, section_id: str) -> None:
        super().__init__(f"section not found: {section_id}")
        self.section_id = section_id


class QuestionNotFoundError(DocumentError):
    code = "question_not_found"

    def __init__(self, question_id: str) -> None:
        super().__init__(f"question not found: {question_id}")
        self.question_id = question_id


class OrderIndexError(DocumentError):
    code = "index_out_of_range"

    def __init__(self, index: int, length: int) -> None:
        super().__init__(f"index {index} out of range for {length} items")
        self.index = index
        self.length = length


class SaveFailedError(RuntimeError):
    """The persistence collaborator rejected or failed a write."""

    code = "save_failed"


class SessionClosedError(RuntimeError):
    """A write was attempted on a preview session that has been submitted."""

    code = "session_closed"


__all__ = [
    "DocumentError",
    "SectionNotFoundError",
    "QuestionNotFoundError",
    "OrderIndexError",
    "SaveFailedError",
    "SessionClosedError",
]
