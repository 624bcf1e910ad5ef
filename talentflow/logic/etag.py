"""ETag computation helpers.

Assessment ETags are emitted for change detection only; saves are last write
wins and no route compares an incoming ``If-Match`` against them.
"""

from __future__ import annotations

import hashlib
import json

from talentflow.models.assessment import Assessment


def compute_assessment_etag(doc: Assessment) -> str:
    """Return a weak ETag over the document content.

    Token: canonical JSON of the wire document (sorted keys, no whitespace)
    -> SHA1 -> W/"…". Timestamps are included so a re-save moves the tag.
    """
    canonical = json.dumps(doc.to_wire(), sort_keys=True, separators=(",", ":"))
    return f'W/"{hashlib.sha1(canonical.encode("utf-8")).hexdigest()}"'


__all__ = ["compute_assessment_etag"]
