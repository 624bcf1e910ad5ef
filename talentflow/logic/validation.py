"""Type-aware validation of candidate responses.

``validate(question, value)`` is a pure function returning a
``ValidationError`` value (never raising) so callers can render the message
next to the field. Rules apply in precedence order and the first failure
wins: required, then text length (text kinds), then numeric parse and
bounds (numeric kind). Choice and file-upload kinds only honour required.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Dict, Optional

from talentflow.models.assessment import Question
from talentflow.models.question_kind import QuestionKind


_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _fmt_number(value: int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class ValidationError:
    question_id: str

    code: ClassVar[str] = "invalid"

    @property
    def message(self) -> str:
        return "Invalid response"

    def as_dict(self) -> Dict[str, str]:
        return {"question_id": self.question_id, "code": self.code, "message": self.message}


@dataclass(frozen=True)
class RequiredError(ValidationError):
    code: ClassVar[str] = "required"

    @property
    def message(self) -> str:
        return "This field is required"


@dataclass(frozen=True)
class TooShortError(ValidationError):
    min_length: int

    code: ClassVar[str] = "too_short"

    @property
    def message(self) -> str:
        return f"Minimum {self.min_length} characters required"


@dataclass(frozen=True)
class TooLongError(ValidationError):
    max_length: int

    code: ClassVar[str] = "too_long"

    @property
    def message(self) -> str:
        return f"Maximum {self.max_length} characters allowed"


@dataclass(frozen=True)
class NotANumberError(ValidationError):
    code: ClassVar[str] = "not_a_number"

    @property
    def message(self) -> str:
        return "Please enter a valid number"


@dataclass(frozen=True)
class BelowMinError(ValidationError):
    minimum: int | float

    code: ClassVar[str] = "below_min"

    @property
    def message(self) -> str:
        return f"Minimum value is {_fmt_number(self.minimum)}"


@dataclass(frozen=True)
class AboveMaxError(ValidationError):
    maximum: int | float

    code: ClassVar[str] = "above_max"

    @property
    def message(self) -> str:
        return f"Maximum value is {_fmt_number(self.maximum)}"


def is_absent(value: Any) -> bool:
    """Return True for a missing answer: None, an empty string or an empty list."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def parse_number(value: Any) -> Optional[float]:
    """Parse a numeric answer (usually the raw input string); None when not a number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return None if math.isnan(number) else number
    if isinstance(value, str):
        text = value.strip()
        if _NUMBER_RE.fullmatch(text):
            return float(text)
    return None


def _check_text(question: Question, value: Any) -> Optional[ValidationError]:
    rules = question.validation
    if rules is None:
        return None
    text = value if isinstance(value, str) else str(value)
    if rules.min_length is not None and len(text) < rules.min_length:
        return TooShortError(question.id, min_length=rules.min_length)
    if rules.max_length is not None and len(text) > rules.max_length:
        return TooLongError(question.id, max_length=rules.max_length)
    return None


def _check_numeric(question: Question, value: Any) -> Optional[ValidationError]:
    number = parse_number(value)
    if number is None:
        return NotANumberError(question.id)
    rules = question.validation
    if rules is None:
        return None
    if rules.min is not None and number < rules.min:
        return BelowMinError(question.id, minimum=rules.min)
    if rules.max is not None and number > rules.max:
        return AboveMaxError(question.id, maximum=rules.max)
    return None


def _no_constraints(question: Question, value: Any) -> Optional[ValidationError]:
    return None


# One entry per QuestionKind member
KIND_RULES: Dict[QuestionKind, Callable[[Question, Any], Optional[ValidationError]]] = {
    QuestionKind.SINGLE_CHOICE: _no_constraints,
    QuestionKind.MULTI_CHOICE: _no_constraints,
    QuestionKind.SHORT_TEXT: _check_text,
    QuestionKind.LONG_TEXT: _check_text,
    QuestionKind.NUMERIC: _check_numeric,
    QuestionKind.FILE_UPLOAD: _no_constraints,
}


def validate(question: Question, value: Any) -> Optional[ValidationError]:
    """Return the first failing rule for ``value`` against ``question``, or None."""
    if is_absent(value):
        return RequiredError(question.id) if question.required else None
    return KIND_RULES[question.type](question, value)


def describe_constraints(question: Question, value: Any = None) -> Optional[str]:
    """Return a length hint for text questions, e.g. ``Min: 50 characters • Current: 12 characters``."""
    rules = question.validation
    if not question.type.is_text or rules is None:
        return None
    parts = []
    if rules.min_length:
        parts.append(f"Min: {rules.min_length} characters")
    if rules.max_length:
        parts.append(f"Max: {rules.max_length} characters")
    if isinstance(value, str) and value:
        parts.append(f"Current: {len(value)} characters")
    return " • ".join(parts) or None


__all__ = [
    "ValidationError",
    "RequiredError",
    "TooShortError",
    "TooLongError",
    "NotANumberError",
    "BelowMinError",
    "AboveMaxError",
    "KIND_RULES",
    "is_absent",
    "parse_number",
    "validate",
    "describe_constraints",
]
