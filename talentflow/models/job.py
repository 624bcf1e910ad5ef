"""Job record as seen by the assessment service (read-mostly collaborator)."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from talentflow.models.assessment import DocumentModel


class Job(DocumentModel):
    id: str
    title: str
    slug: str
    status: Literal["active", "archived"] = "active"
    order: int = 0
    tags: tuple[str, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None


__all__ = ["Job"]
