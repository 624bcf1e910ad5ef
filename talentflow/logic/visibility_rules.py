"""Conditional visibility evaluation for assessment questions.

Centralizes the equality-based visibility check, visible-set computation and
the dependency-graph check used on save, so the preview session and the
route handlers share one definition.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping

from talentflow.logic.assessment_document import iter_questions
from talentflow.models.assessment import Assessment, Question

logger = logging.getLogger(__name__)


def _strict_equal(left: Any, right: Any) -> bool:
    # No coercion: "1" != 1 and True != 1
    return type(left) is type(right) and left == right


def matches_show_when(dependency_value: Any, show_when: str | tuple[str, ...]) -> bool:
    """Return True if the dependency's response satisfies ``show_when``.

    A tuple of values matches by membership, a single value by strict
    equality. An absent dependency response never matches.
    """
    if dependency_value is None:
        return False
    if isinstance(show_when, tuple):
        return any(_strict_equal(dependency_value, candidate) for candidate in show_when)
    return _strict_equal(dependency_value, show_when)


def is_visible(question: Question, responses: Mapping[str, Any]) -> bool:
    """Return True if ``question`` is shown given the current response map.

    Questions without conditional logic are always visible. A rule pointing
    at a question that does not exist reads as an absent response, so the
    question stays hidden.
    """
    rule = question.conditional_logic
    if rule is None:
        return True
    return matches_show_when(responses.get(rule.depends_on), rule.show_when)


def visible_question_ids(doc: Assessment, responses: Mapping[str, Any]) -> List[str]:
    """Return ids of currently visible questions in document order."""
    return [q.id for q in iter_questions(doc) if is_visible(q, responses)]


# Edges a save must not introduce; a reference to a missing question is
# tolerated and hides the question at evaluation time
BLOCKING_DEPENDENCY_CODES = frozenset({"self_dependency", "forward_dependency"})


@dataclass(frozen=True)
class DependencyIssue:
    question_id: str
    depends_on: str
    code: str

    def as_dict(self) -> dict:
        return {"question_id": self.question_id, "depends_on": self.depends_on, "code": self.code}


def check_dependencies(doc: Assessment) -> List[DependencyIssue]:
    """Return every conditional-logic edge that does not point backwards.

    - ``unknown_dependency``: the referenced question is not in the document
    - ``self_dependency``: the question depends on itself
    - ``forward_dependency``: the referenced question comes later in document order

    Any cycle contains a self or forward edge, so an empty result also means
    the dependency graph is acyclic.
    """
    positions = {q.id: pos for pos, q in enumerate(iter_questions(doc))}
    issues: List[DependencyIssue] = []
    for question in iter_questions(doc):
        rule = question.conditional_logic
        if rule is None:
            continue
        target = rule.depends_on
        if target == question.id:
            code = "self_dependency"
        elif target not in positions:
            code = "unknown_dependency"
        elif positions[target] > positions[question.id]:
            code = "forward_dependency"
        else:
            continue
        issues.append(DependencyIssue(question.id, target, code))
    if issues:
        logger.info(
            "dependency_check_issues assessment_id=%s issues=%s",
            doc.id,
            [i.as_dict() for i in issues],
        )
    return issues


__all__ = [
    "matches_show_when",
    "is_visible",
    "visible_question_ids",
    "BLOCKING_DEPENDENCY_CODES",
    "DependencyIssue",
    "check_dependencies",
]
