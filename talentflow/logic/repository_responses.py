"""Completed assessment response storage."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

from sqlalchemy import text as sql_text
from sqlalchemy.exc import SQLAlchemyError

from talentflow.db.base import get_engine
from talentflow.logic.assessment_document import new_identity
from talentflow.logic.errors import SaveFailedError
from talentflow.logic.events import ASSESSMENT_COMPLETED, publish
from talentflow.models.assessment import AssessmentResponse

logger = logging.getLogger(__name__)


def _row_to_response(row: Mapping[str, Any]) -> AssessmentResponse:
    return AssessmentResponse(
        id=row["response_id"],
        assessment_id=row["assessment_id"],
        candidate_id=row["candidate_id"],
        responses=json.loads(row["responses_json"] or "{}"),
        completed_at=row["completed_at"],
        created_at=row["created_at"],
    )


def submit_responses(
    assessment_id: str,
    responses: Mapping[str, Any],
    candidate_id: Optional[str] = None,
) -> AssessmentResponse:
    """Persist a completed response map; raises ``SaveFailedError`` on database errors."""
    now = datetime.now(timezone.utc)
    response_id = new_identity("response")
    eng = get_engine()
    try:
        with eng.begin() as conn:
            conn.execute(
                sql_text(
                    "INSERT INTO assessment_response (response_id, assessment_id, candidate_id, "
                    "responses_json, completed_at, created_at) "
                    "VALUES (:rid, :aid, :cid, :responses, :completed, :created)"
                ),
                {
                    "rid": response_id,
                    "aid": assessment_id,
                    "cid": candidate_id,
                    "responses": json.dumps(dict(responses)),
                    "completed": now.isoformat(),
                    "created": now.isoformat(),
                },
            )
    except SQLAlchemyError as exc:
        logger.error("assessment_response_save_failed assessment_id=%s", assessment_id, exc_info=True)
        raise SaveFailedError(f"could not store responses for assessment {assessment_id}") from exc

    logger.info(
        "assessment_response_stored response_id=%s assessment_id=%s candidate_id=%s answers=%s",
        response_id,
        assessment_id,
        candidate_id,
        len(responses),
    )
    publish(
        ASSESSMENT_COMPLETED,
        {"assessment_id": assessment_id, "response_id": response_id, "candidate_id": candidate_id},
    )
    return AssessmentResponse(
        id=response_id,
        assessment_id=assessment_id,
        candidate_id=candidate_id,
        responses=dict(responses),
        completed_at=now,
        created_at=now,
    )


def list_responses(assessment_id: str) -> List[AssessmentResponse]:
    eng = get_engine()
    with eng.connect() as conn:
        rows = conn.execute(
            sql_text(
                "SELECT response_id, assessment_id, candidate_id, responses_json, completed_at, created_at "
                "FROM assessment_response WHERE assessment_id = :aid ORDER BY created_at ASC, response_id ASC"
            ),
            {"aid": assessment_id},
        ).mappings().all()
    return [_row_to_response(r) for r in rows]


__all__ = ["submit_responses", "list_responses"]
