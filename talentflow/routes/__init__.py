"""APIRouter registration for the assessment service."""

from __future__ import annotations

from fastapi import APIRouter

from talentflow.routes.assessments import router as assessments_router
from talentflow.routes.authoring import router as authoring_router
from talentflow.routes.preview import router as preview_router

api_router = APIRouter()
api_router.include_router(assessments_router, tags=["Assessments"])
api_router.include_router(authoring_router, tags=["Authoring"])
api_router.include_router(preview_router, tags=["Preview"])

__all__ = ["api_router"]
