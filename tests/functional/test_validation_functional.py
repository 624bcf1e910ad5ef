"""Functional tests for response validation.

Covers rule precedence (required, then length, then numeric), message text,
boundary values and the purity of ``validate``.
"""

from __future__ import annotations

import pytest

from talentflow.logic.validation import (
    AboveMaxError,
    BelowMinError,
    NotANumberError,
    RequiredError,
    TooLongError,
    TooShortError,
    describe_constraints,
    is_absent,
    parse_number,
    validate,
)
from talentflow.models.assessment import Question, QuestionValidation
from talentflow.models.question_kind import QuestionKind


def _question(kind: QuestionKind, required: bool = False, **rules) -> Question:
    return Question(
        id="q1",
        type=kind,
        title="Q",
        required=required,
        validation=QuestionValidation(**rules) if rules else None,
    )


@pytest.mark.parametrize("value", [None, "", []])
def test_required_question_rejects_absent_values(value):
    """Verifies a required question fails on None, empty string and empty list."""
    question = _question(QuestionKind.SHORT_TEXT, required=True)
    error = validate(question, value)
    assert isinstance(error, RequiredError)
    assert error.code == "required"
    assert error.message == "This field is required"


@pytest.mark.parametrize("kind", list(QuestionKind))
def test_optional_question_accepts_absent_value_for_every_kind(kind):
    """Verifies absent answers pass every kind when the question is optional."""
    assert validate(_question(kind), None) is None


def test_required_present_value_passes():
    question = _question(QuestionKind.SINGLE_CHOICE, required=True)
    assert validate(question, "Yes") is None


def test_min_length_boundary():
    """Verifies minLength 5: 4 characters fail, 5 pass."""
    question = _question(QuestionKind.LONG_TEXT, min_length=5)
    error = validate(question, "abcd")
    assert isinstance(error, TooShortError)
    assert error.min_length == 5
    assert error.message == "Minimum 5 characters required"
    assert validate(question, "abcde") is None


def test_max_length_boundary():
    question = _question(QuestionKind.SHORT_TEXT, max_length=3)
    assert validate(question, "abc") is None
    error = validate(question, "abcd")
    assert isinstance(error, TooLongError)
    assert error.message == "Maximum 3 characters allowed"


def test_required_takes_precedence_over_length():
    question = _question(QuestionKind.SHORT_TEXT, required=True, min_length=5)
    assert isinstance(validate(question, ""), RequiredError)


@pytest.mark.parametrize("value", ["abc", "1.2.3", "", " ", "1e", True])
def test_numeric_rejects_unparseable_input(value):
    question = _question(QuestionKind.NUMERIC)
    error = validate(question, value)
    if value == "":
        # Empty is absent, not a parse failure
        assert error is None
    else:
        assert isinstance(error, NotANumberError)
        assert error.message == "Please enter a valid number"


def test_numeric_bounds_are_inclusive():
    question = _question(QuestionKind.NUMERIC, min=50, max=300)
    assert validate(question, "50") is None
    assert validate(question, "300") is None
    below = validate(question, "49.5")
    above = validate(question, "301")
    assert isinstance(below, BelowMinError) and below.message == "Minimum value is 50"
    assert isinstance(above, AboveMaxError) and above.message == "Maximum value is 300"


def test_numeric_accepts_json_numbers():
    question = _question(QuestionKind.NUMERIC, min=1, max=10)
    assert validate(question, 7) is None
    assert isinstance(validate(question, 11.5), AboveMaxError)


@pytest.mark.parametrize("kind", [QuestionKind.SINGLE_CHOICE, QuestionKind.MULTI_CHOICE, QuestionKind.FILE_UPLOAD])
def test_choice_and_upload_kinds_ignore_length_rules(kind):
    question = _question(kind, min_length=100)
    assert validate(question, "x") is None


def test_validate_is_pure():
    """Verifies identical inputs give identical results and nothing is mutated."""
    question = _question(QuestionKind.LONG_TEXT, required=True, min_length=5)
    value = ["not", "text"]
    snapshot = question.model_dump()
    first = validate(question, "abc")
    second = validate(question, "abc")
    assert first == second
    validate(question, value)
    assert value == ["not", "text"]
    assert question.model_dump() == snapshot


def test_error_as_dict_shape():
    error = validate(_question(QuestionKind.SHORT_TEXT, required=True), None)
    assert error.as_dict() == {"question_id": "q1", "code": "required", "message": "This field is required"}


def test_is_absent_and_parse_number_helpers():
    assert is_absent(None) and is_absent("") and is_absent([])
    assert not is_absent(0) and not is_absent(" ") and not is_absent(["a"])
    assert parse_number(" 42 ") == 42.0
    assert parse_number("-.5") == -0.5
    assert parse_number("1e3") == 1000.0
    assert parse_number(float("nan")) is None
    assert parse_number(False) is None


def test_describe_constraints_for_text_questions():
    question = _question(QuestionKind.LONG_TEXT, min_length=50, max_length=500)
    hint = describe_constraints(question, "twelve chars")
    assert hint == "Min: 50 characters • Max: 500 characters • Current: 12 characters"
    assert describe_constraints(_question(QuestionKind.NUMERIC, min=1), "3") is None


@pytest.mark.parametrize("text", ["Infinity", "-Infinity", "0x1A", "1_000", ""])
def test_numeric_answers_are_decimal_literals_only(text):
    assert parse_number(text) is None


def test_text_length_counts_code_points():
    question = _question(QuestionKind.SHORT_TEXT, min_length=2, max_length=2)
    # One emoji is a single code point
    assert isinstance(validate(question, "\U0001F600"), TooShortError)
    assert validate(question, "\U0001F600\U0001F600") is None
    assert validate(question, "é!") is None
