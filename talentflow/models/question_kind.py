"""QuestionKind enumeration for the six assessment question types.

A closed set: validation dispatch keys on every member, so adding a kind
means adding its rule in `talentflow/logic/validation.py` as well.
"""

from __future__ import annotations

from enum import Enum


class QuestionKind(str, Enum):
    SINGLE_CHOICE = "single-choice"
    MULTI_CHOICE = "multi-choice"
    SHORT_TEXT = "short-text"
    LONG_TEXT = "long-text"
    NUMERIC = "numeric"
    FILE_UPLOAD = "file-upload"

    @property
    def is_choice(self) -> bool:
        return self in (QuestionKind.SINGLE_CHOICE, QuestionKind.MULTI_CHOICE)

    @property
    def is_text(self) -> bool:
        return self in (QuestionKind.SHORT_TEXT, QuestionKind.LONG_TEXT)


__all__ = ["QuestionKind"]
