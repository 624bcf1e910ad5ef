"""Helpers to compute visibility deltas and suppressed answers.

Exposes a single function that computes now_visible, now_hidden, and the list
of suppressed answers using a caller-provided probe for answer existence.
"""

from __future__ import annotations

from typing import Callable, Iterable, List, Tuple


def compute_visibility_delta(
    pre_visible: Iterable[str],
    post_visible: Iterable[str],
    has_answer: Callable[[str], bool],
) -> Tuple[List[str], List[str], List[str]]:
    """Compute visibility delta and suppressed answers.

    - now_visible: questions newly visible (in post but not in pre)
    - now_hidden: questions newly hidden (in pre but not in post)
    - suppressed_answers: subset of now_hidden that still hold a stored answer

    Hidden answers are kept, not cleared; ``suppressed_answers`` only reports
    them. Lists keep the order of the input iterables (document order).
    """
    pre_list = [str(qid) for qid in pre_visible]
    post_list = [str(qid) for qid in post_visible]
    pre_set, post_set = set(pre_list), set(post_list)

    now_visible = [qid for qid in post_list if qid not in pre_set]
    now_hidden = [qid for qid in pre_list if qid not in post_set]
    suppressed_answers = [qid for qid in now_hidden if has_answer(qid)]
    return now_visible, now_hidden, suppressed_answers


__all__ = ["compute_visibility_delta"]
