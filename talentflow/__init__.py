"""TalentFlow Assessment Service package.

Exposes the FastAPI application factory. The assessment engine (document
model, validation, visibility, builder and preview sessions) lives in
`talentflow/logic/`; HTTP route handlers live in `talentflow/routes/`.
"""

from __future__ import annotations

from talentflow.main import create_app

__all__ = ["create_app"]
