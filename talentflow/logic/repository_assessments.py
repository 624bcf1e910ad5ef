"""Assessment data access helpers.

Implements the load/save contract the builder works against. There is at
most one assessment per job (``uq_assessment_job``); a save is an upsert
keyed by job, last write wins. Sections are stored as one JSON column since
the document is always read and written whole.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

from sqlalchemy import text as sql_text
from sqlalchemy.exc import SQLAlchemyError

from talentflow.db.base import get_engine
from talentflow.logic.assessment_document import new_identity, normalize_order, question_count
from talentflow.logic.errors import SaveFailedError
from talentflow.logic.events import ASSESSMENT_SAVED, publish
from talentflow.models.assessment import Assessment
from talentflow.models.response_types import AssessmentSummary

logger = logging.getLogger(__name__)

_ASSESSMENT_COLUMNS = "assessment_id, job_id, title, description, sections_json, created_at, updated_at"


def _row_to_assessment(row: Mapping[str, Any]) -> Assessment:
    return Assessment.model_validate(
        {
            "id": row["assessment_id"],
            "jobId": row["job_id"],
            "title": row["title"],
            "description": row["description"],
            "sections": json.loads(row["sections_json"] or "[]"),
            "createdAt": row["created_at"],
            "updatedAt": row["updated_at"],
        }
    )


def load_assessment(job_id: str) -> Optional[Assessment]:
    """Return the saved assessment for ``job_id`` or None when none exists."""
    eng = get_engine()
    with eng.connect() as conn:
        row = conn.execute(
            sql_text(f"SELECT {_ASSESSMENT_COLUMNS} FROM assessment WHERE job_id = :job_id"),
            {"job_id": job_id},
        ).mappings().fetchone()
    return _row_to_assessment(row) if row else None


def save_assessment(job_id: str, payload: Mapping[str, Any]) -> Assessment:
    """Upsert the assessment for ``job_id`` from a ``{title, description, sections}`` body.

    On create a fresh ``id`` and ``createdAt`` are assigned; on update both
    are preserved and only ``updatedAt`` moves. Order fields are recomputed
    from position before storage. Database failures surface as
    ``SaveFailedError``.
    """
    body = dict(payload)
    body.pop("id", None)
    body.pop("createdAt", None)
    body.pop("created_at", None)
    body["jobId"] = job_id
    body.pop("job_id", None)
    doc = normalize_order(Assessment.model_validate(body))
    sections_json = json.dumps([s.to_wire() for s in doc.sections])
    now = datetime.now(timezone.utc)

    eng = get_engine()
    try:
        with eng.begin() as conn:
            existing = conn.execute(
                sql_text("SELECT assessment_id, created_at FROM assessment WHERE job_id = :job_id"),
                {"job_id": job_id},
            ).mappings().fetchone()
            if existing is not None:
                assessment_id = str(existing["assessment_id"])
                created_at = datetime.fromisoformat(str(existing["created_at"]))
                conn.execute(
                    sql_text(
                        "UPDATE assessment SET title = :title, description = :description, "
                        "sections_json = :sections, updated_at = :updated WHERE assessment_id = :aid"
                    ),
                    {
                        "title": doc.title,
                        "description": doc.description,
                        "sections": sections_json,
                        "updated": now.isoformat(),
                        "aid": assessment_id,
                    },
                )
                created = False
            else:
                assessment_id = new_identity("assessment")
                created_at = now
                conn.execute(
                    sql_text(
                        "INSERT INTO assessment (assessment_id, job_id, title, description, sections_json, "
                        "created_at, updated_at) VALUES (:aid, :job_id, :title, :description, :sections, "
                        ":created, :updated)"
                    ),
                    {
                        "aid": assessment_id,
                        "job_id": job_id,
                        "title": doc.title,
                        "description": doc.description,
                        "sections": sections_json,
                        "created": created_at.isoformat(),
                        "updated": now.isoformat(),
                    },
                )
                created = True
    except SQLAlchemyError as exc:
        logger.error("assessment_save_failed job_id=%s", job_id, exc_info=True)
        raise SaveFailedError(f"could not save assessment for job {job_id}") from exc

    saved = doc.model_copy(update={"id": assessment_id, "created_at": created_at, "updated_at": now})
    logger.info(
        "assessment_saved job_id=%s assessment_id=%s created=%s sections=%s questions=%s",
        job_id,
        assessment_id,
        created,
        len(saved.sections),
        question_count(saved),
    )
    publish(ASSESSMENT_SAVED, {"job_id": job_id, "assessment_id": assessment_id, "created": created})
    return saved


def list_assessments() -> List[AssessmentSummary]:
    """Return one summary per saved assessment, in job board order."""
    eng = get_engine()
    with eng.connect() as conn:
        rows = conn.execute(
            sql_text(
                "SELECT a.assessment_id, a.job_id, a.title, a.description, a.sections_json, "
                "a.created_at, a.updated_at, j.title AS job_title "
                "FROM assessment a LEFT JOIN job j ON j.job_id = a.job_id "
                "ORDER BY COALESCE(j.job_order, 0) ASC, a.job_id ASC"
            )
        ).mappings().all()
    summaries: List[AssessmentSummary] = []
    for row in rows:
        doc = _row_to_assessment(row)
        summaries.append(
            AssessmentSummary(
                assessment_id=doc.id,
                job_id=doc.job_id,
                job_title=row["job_title"],
                title=doc.title,
                section_count=len(doc.sections),
                question_count=question_count(doc),
                updated_at=doc.updated_at,
            )
        )
    return summaries


__all__ = [
    "load_assessment",
    "save_assessment",
    "list_assessments",
]
