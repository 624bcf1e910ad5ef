"""Central in-memory state holders.

Preview sessions are not persisted: they live in process until deleted or
evicted. A submitted session stays registered so a repeated submit returns
its terminal report. The store is bounded; once it holds ``limit`` sessions
the oldest one is evicted on registration.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Dict, Optional

from talentflow.logic.preview import PreviewSession

logger = logging.getLogger(__name__)

DEFAULT_PREVIEW_SESSION_LIMIT = 256

# session_id -> PreviewSession, oldest first
PREVIEW_SESSIONS: "OrderedDict[str, PreviewSession]" = OrderedDict()

# session_id -> job_id the session was opened for
PREVIEW_SESSION_JOBS: Dict[str, str] = {}


def register_preview_session(
    session: PreviewSession,
    job_id: str,
    limit: int = DEFAULT_PREVIEW_SESSION_LIMIT,
) -> PreviewSession:
    while len(PREVIEW_SESSIONS) >= limit:
        evicted_id, _ = PREVIEW_SESSIONS.popitem(last=False)
        PREVIEW_SESSION_JOBS.pop(evicted_id, None)
        logger.info("preview_session_evicted session_id=%s limit=%s", evicted_id, limit)
    PREVIEW_SESSIONS[session.session_id] = session
    PREVIEW_SESSION_JOBS[session.session_id] = job_id
    return session


def get_preview_session(session_id: str) -> Optional[PreviewSession]:
    return PREVIEW_SESSIONS.get(session_id)


def drop_preview_session(session_id: str) -> bool:
    PREVIEW_SESSION_JOBS.pop(session_id, None)
    return PREVIEW_SESSIONS.pop(session_id, None) is not None


def clear_preview_sessions() -> None:
    PREVIEW_SESSIONS.clear()
    PREVIEW_SESSION_JOBS.clear()


__all__ = [
    "DEFAULT_PREVIEW_SESSION_LIMIT",
    "PREVIEW_SESSIONS",
    "PREVIEW_SESSION_JOBS",
    "register_preview_session",
    "get_preview_session",
    "drop_preview_session",
    "clear_preview_sessions",
]
