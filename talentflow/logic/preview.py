"""Preview/response session over one assessment document.

A session owns a response map for the duration of one fill-in. Each change
stores the value and clears that question's error (errors are only fully
recomputed at submit). ``submit()`` validates every visible question; with
no failures the response map is handed to the ``on_submit`` collaborator and
the session becomes ``submitted``, a terminal state.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from talentflow.logic.assessment_document import iter_questions
from talentflow.logic.errors import QuestionNotFoundError, SessionClosedError
from talentflow.logic.validation import ValidationError, is_absent, validate
from talentflow.logic.visibility_delta import compute_visibility_delta
from talentflow.logic.visibility_rules import is_visible, visible_question_ids
from talentflow.models.assessment import Assessment, Question
from talentflow.models.question_kind import QuestionKind
from talentflow.models.response_types import VisibilityDelta

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    EDITING = "editing"
    SUBMITTED = "submitted"


@dataclass(frozen=True)
class SubmitReport:
    state: SessionState
    errors: Dict[str, ValidationError] = field(default_factory=dict)

    @property
    def submitted(self) -> bool:
        return self.state is SessionState.SUBMITTED


class PreviewSession:
    def __init__(
        self,
        document: Assessment,
        on_submit: Optional[Callable[[Dict[str, Any]], Any]] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self.session_id = session_id or uuid.uuid4().hex
        self.document = document
        self.responses: Dict[str, Any] = {}
        self.errors: Dict[str, ValidationError] = {}
        self.state = SessionState.EDITING
        # Whatever the collaborator returned for the accepted submission
        self.receipt: Any = None
        self._on_submit = on_submit
        self._questions = {q.id: q for q in iter_questions(document)}

    def _question(self, question_id: str) -> Question:
        try:
            return self._questions[question_id]
        except KeyError:
            raise QuestionNotFoundError(question_id) from None

    def _ensure_open(self) -> None:
        if self.state is SessionState.SUBMITTED:
            raise SessionClosedError(f"preview session {self.session_id} is already submitted")

    def visible_question_ids(self) -> List[str]:
        return visible_question_ids(self.document, self.responses)

    def visible_questions(self) -> List[Question]:
        return [q for q in iter_questions(self.document) if is_visible(q, self.responses)]

    @property
    def visible_question_count(self) -> int:
        return len(self.visible_question_ids())

    def update_response(self, question_id: str, value: Any) -> VisibilityDelta:
        """Store ``value`` for the question and report what became shown or hidden.

        Answers of questions that become hidden are kept; they are reported as
        ``suppressed_answers`` and skipped at submit.
        """
        self._ensure_open()
        self._question(question_id)
        before = self.visible_question_ids()
        self.responses[question_id] = list(value) if isinstance(value, (list, tuple)) else value
        self.errors.pop(question_id, None)
        now_visible, now_hidden, suppressed = compute_visibility_delta(
            before,
            self.visible_question_ids(),
            lambda qid: not is_absent(self.responses.get(qid)),
        )
        if now_visible or now_hidden:
            logger.info(
                "preview_visibility_changed session_id=%s question_id=%s now_visible=%s now_hidden=%s",
                self.session_id,
                question_id,
                now_visible,
                now_hidden,
            )
        return VisibilityDelta(now_visible=now_visible, now_hidden=now_hidden, suppressed_answers=suppressed)

    def toggle_option(self, question_id: str, option: str) -> List[str]:
        """Add ``option`` to a multi-choice answer, or remove it when already selected.

        The answer stays a list: deselecting the last option leaves ``[]``.
        """
        self._ensure_open()
        question = self._question(question_id)
        if question.type is not QuestionKind.MULTI_CHOICE:
            raise ValueError(f"question {question_id} is not multi-choice")
        existing = self.responses.get(question_id)
        current = list(existing) if isinstance(existing, (list, tuple)) else []
        if option in current:
            current = [v for v in current if v != option]
        else:
            current.append(option)
        self.update_response(question_id, current)
        return current

    def check(self, question_id: str) -> Optional[ValidationError]:
        """Validate one answer for live feedback without touching the error map."""
        return validate(self._question(question_id), self.responses.get(question_id))

    def submit(self) -> SubmitReport:
        """Validate visible questions and, if all pass, emit the response map.

        Calling again after a successful submit returns the same terminal
        report and emits nothing. If ``on_submit`` raises, the session stays
        ``editing`` and the exception propagates.
        """
        if self.state is SessionState.SUBMITTED:
            logger.info("preview_resubmit_ignored session_id=%s", self.session_id)
            return SubmitReport(SessionState.SUBMITTED)

        errors: Dict[str, ValidationError] = {}
        for question in iter_questions(self.document):
            if not is_visible(question, self.responses):
                continue
            error = validate(question, self.responses.get(question.id))
            if error is not None:
                errors[question.id] = error
        self.errors = errors
        if errors:
            logger.info(
                "preview_submit_rejected session_id=%s error_count=%s question_ids=%s",
                self.session_id,
                len(errors),
                list(errors),
            )
            return SubmitReport(SessionState.EDITING, dict(errors))

        if self._on_submit is not None:
            self.receipt = self._on_submit(dict(self.responses))
        self.state = SessionState.SUBMITTED
        logger.info(
            "preview_submitted session_id=%s assessment_id=%s answered=%s",
            self.session_id,
            self.document.id,
            len(self.responses),
        )
        return SubmitReport(SessionState.SUBMITTED)


__all__ = ["SessionState", "SubmitReport", "PreviewSession"]
