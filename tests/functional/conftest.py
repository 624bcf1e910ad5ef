"""Functional test bootstrap.

Every test gets a fresh in-memory SQLite database: the cached engine is
discarded, a new StaticPool engine is built and the packaged migrations are
applied. Preview sessions and buffered domain events are cleared so tests
never observe each other's state.
"""

from __future__ import annotations

import os

import pytest

# Point the app at in-memory SQLite before anything imports talentflow.main
_DB_URL = "sqlite+pysqlite:///:memory:"
os.environ["TEST_DATABASE_URL"] = _DB_URL
os.environ["AUTO_APPLY_MIGRATIONS"] = "1"
os.environ["SEED_ENABLED"] = "0"

from talentflow.db.base import get_engine, reset_engine  # noqa: E402
from talentflow.db.migrations_runner import apply_migrations  # noqa: E402
from talentflow.logic.events import get_buffered_events  # noqa: E402
from talentflow.logic.inmemory_state import clear_preview_sessions  # noqa: E402
from talentflow.models.assessment import Assessment  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_database():
    reset_engine()
    engine = get_engine(_DB_URL)
    apply_migrations(engine)
    clear_preview_sessions()
    get_buffered_events(clear=True)
    yield engine
    clear_preview_sessions()
    reset_engine()


@pytest.fixture()
def client():
    from fastapi.testclient import TestClient

    from talentflow.main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client


def sample_document_body() -> dict:
    """Two sections; q_reason is only shown when q_remote is answered "Yes"."""
    return {
        "title": "Backend Engineer Assessment",
        "description": "Technical assessment for Backend Engineer position",
        "sections": [
            {
                "id": "s_skills",
                "title": "Technical Skills",
                "order": 1,
                "questions": [
                    {
                        "id": "q_years",
                        "type": "single-choice",
                        "title": "Years of experience?",
                        "required": True,
                        "options": ["0-1 years", "1-3 years", "3-5 years", "5+ years"],
                        "order": 1,
                    },
                    {
                        "id": "q_stack",
                        "type": "multi-choice",
                        "title": "Technologies used?",
                        "required": True,
                        "options": ["Python", "Go", "Rust"],
                        "order": 2,
                    },
                ],
            },
            {
                "id": "s_background",
                "title": "Experience & Background",
                "order": 2,
                "questions": [
                    {
                        "id": "q_remote",
                        "type": "single-choice",
                        "title": "Available for remote work?",
                        "required": True,
                        "options": ["Yes", "No"],
                        "order": 1,
                    },
                    {
                        "id": "q_reason",
                        "type": "long-text",
                        "title": "Why this position?",
                        "required": True,
                        "validation": {"minLength": 5, "maxLength": 50},
                        "conditionalLogic": {"dependsOn": "q_remote", "showWhen": "Yes"},
                        "order": 2,
                    },
                    {
                        "id": "q_salary",
                        "type": "numeric",
                        "title": "Expected salary (thousands)?",
                        "required": False,
                        "validation": {"min": 50, "max": 300},
                        "order": 3,
                    },
                ],
            },
        ],
    }


@pytest.fixture()
def sample_body() -> dict:
    return sample_document_body()


@pytest.fixture()
def sample_document() -> Assessment:
    return Assessment.model_validate({**sample_document_body(), "jobId": "job_1"})
