"""Job data access helpers.

Jobs are owned by the wider applicant-tracking system; the assessment
service only needs to look them up (for draft titles and summaries) and to
create them when seeding sample data.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional

from sqlalchemy import text as sql_text

from talentflow.db.base import get_engine
from talentflow.logic.errors import SaveFailedError
from talentflow.models.job import Job

logger = logging.getLogger(__name__)

_JOB_COLUMNS = "job_id, title, slug, status, job_order, tags_json, created_at, updated_at"


def slugify(title: str) -> str:
    return re.sub(r"\s+", "-", title.strip().lower())


def _row_to_job(row: Mapping[str, Any]) -> Job:
    return Job.model_validate(
        {
            "id": row["job_id"],
            "title": row["title"],
            "slug": row["slug"],
            "status": row["status"],
            "order": int(row["job_order"] or 0),
            "tags": json.loads(row["tags_json"] or "[]"),
            "created_at": row["created_at"],
            "updated_at": row["updated_at"],
        }
    )


def create_job(
    title: str,
    *,
    job_id: Optional[str] = None,
    slug: Optional[str] = None,
    status: str = "active",
    tags: Iterable[str] = (),
    created_at: Optional[datetime] = None,
) -> Job:
    """Insert a job appended at the end of the board order."""
    now = created_at or datetime.now(timezone.utc)
    eng = get_engine()
    with eng.begin() as conn:
        next_order = int(
            conn.execute(sql_text("SELECT COALESCE(MAX(job_order), 0) + 1 FROM job")).scalar() or 1
        )
        job_id = job_id or f"job_{next_order}"
        conn.execute(
            sql_text(
                "INSERT INTO job (job_id, title, slug, status, job_order, tags_json, created_at, updated_at) "
                "VALUES (:id, :title, :slug, :status, :ord, :tags, :created, :updated)"
            ),
            {
                "id": job_id,
                "title": title,
                "slug": slug or f"{slugify(title)}-{next_order}",
                "status": status,
                "ord": next_order,
                "tags": json.dumps(list(tags)),
                "created": now.isoformat(),
                "updated": now.isoformat(),
            },
        )
    logger.info("job_created job_id=%s order=%s", job_id, next_order)
    job = get_job(job_id)
    if job is None:
        logger.error("job_create_unreadable job_id=%s", job_id)
        raise SaveFailedError(f"job {job_id} was not readable after insert")
    return job


def get_job(job_id: str) -> Optional[Job]:
    eng = get_engine()
    with eng.connect() as conn:
        row = conn.execute(
            sql_text(f"SELECT {_JOB_COLUMNS} FROM job WHERE job_id = :id"),
            {"id": job_id},
        ).mappings().fetchone()
    return _row_to_job(row) if row else None


def list_jobs(status: Optional[str] = None) -> List[Job]:
    """Return jobs in board order, optionally filtered by status."""
    query = f"SELECT {_JOB_COLUMNS} FROM job"
    params: dict = {}
    if status:
        query += " WHERE status = :status"
        params["status"] = status
    query += " ORDER BY job_order ASC, job_id ASC"
    eng = get_engine()
    with eng.connect() as conn:
        rows = conn.execute(sql_text(query), params).mappings().all()
    return [_row_to_job(r) for r in rows]


def count_jobs() -> int:
    eng = get_engine()
    with eng.connect() as conn:
        return int(conn.execute(sql_text("SELECT COUNT(*) FROM job")).scalar() or 0)


__all__ = ["slugify", "create_job", "get_job", "list_jobs", "count_jobs"]
