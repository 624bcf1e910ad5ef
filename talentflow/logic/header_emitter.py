"""Centralised ETag header emitter.

Route handlers never assign ETag headers directly; they call
``emit_etag_headers`` so the domain header, the generic ``ETag`` header and
the CORS expose list stay consistent.
"""

from __future__ import annotations

import logging

from fastapi import Response

logger = logging.getLogger(__name__)


SCOPE_TO_HEADER = {
    "assessment": "Assessment-ETag",
}

EXPOSE_HEADERS: list[str] = ["ETag", "Assessment-ETag", "X-Request-Id"]


def emit_etag_headers(response: Response, scope: str, token: str, include_generic: bool = True) -> None:
    """Set domain and generic ETag headers on the response.

    - `scope`: one of SCOPE_TO_HEADER keys
    - `token`: the entity tag value to set
    - `include_generic`: when True, also set `ETag` alongside the domain header
    """
    header_name = SCOPE_TO_HEADER.get(scope)
    if header_name is None:
        raise KeyError(f"unknown etag scope: {scope}")
    if not token:
        # Never emit empty ETag values
        logger.warning("etag_emit_skipped scope=%s reason=empty_token", scope)
        return
    response.headers[header_name] = token
    if include_generic:
        response.headers["ETag"] = token

    existing = response.headers.get("Access-Control-Expose-Headers", "")
    merged = list(EXPOSE_HEADERS)
    for name in (t.strip() for t in existing.split(",")):
        if name and name not in merged:
            merged.append(name)
    response.headers["Access-Control-Expose-Headers"] = ", ".join(merged)
    logger.debug("etag_emit scope=%s header=%s generic=%s", scope, header_name, include_generic)


__all__ = ["emit_etag_headers", "SCOPE_TO_HEADER", "EXPOSE_HEADERS"]
