"""Configuration utilities.

This module loads application configuration with the following rules:
- Primary source: `talentflow_config.json` at the project root.
- Overrides: environment variables, then optional text files under `config/`.
- Validation: Pydantic models enforce required fields and value constraints.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from talentflow.db.base import DEFAULT_DATABASE_URL
from talentflow.logic.inmemory_state import DEFAULT_PREVIEW_SESSION_LIMIT

CONFIG_DIR = Path("config")
ROOT_TALENTFLOW_CONFIG = Path("talentflow_config.json")
logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        # Unreadable override files are ignored
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


def _flag(text: Optional[str]) -> bool:
    return str(text).strip().lower() in _TRUE_VALUES


class DatabaseConfig(BaseModel):
    dsn: str
    auto_apply_migrations: bool = Field(default=True)

    @field_validator("dsn")
    @classmethod
    def dsn_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("database.dsn must be a non-empty string")
        return v


class AssessmentConfig(BaseModel):
    # When false, saves with forward, self or unknown dependencies are rejected
    allow_forward_dependencies: bool = Field(default=False)
    max_preview_sessions: int = Field(default=DEFAULT_PREVIEW_SESSION_LIMIT, gt=0)


class SeedConfig(BaseModel):
    enabled: bool = Field(default=False)
    job_count: int = Field(default=25, ge=1)
    assessment_count: int = Field(default=3, ge=0)
    random_seed: int = Field(default=42)


class AppConfig(BaseModel):
    database: DatabaseConfig
    assessment: AssessmentConfig = Field(default_factory=AssessmentConfig)
    seed: SeedConfig = Field(default_factory=SeedConfig)


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def config_from_request(request) -> AppConfig:  # type: ignore[no-untyped-def]
    """Return the config attached to the running app, loading it when absent."""
    cfg = getattr(request.app.state, "config", None)
    return cfg if isinstance(cfg, AppConfig) else load_config()


def load_config() -> AppConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) Text files in `config/` (optional)
    3) talentflow_config.json at project root (primary base)
    4) Safe defaults for development
    """

    base = _read_json_file(ROOT_TALENTFLOW_CONFIG)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        if isinstance(cur, bool):
            return "true" if cur else "false"
        return str(cur) if cur is not None else default

    # Database
    dsn = (
        _env("TEST_DATABASE_URL")
        or _env("DATABASE_URL")
        or _read_config_file("database.url")
        or _base("database.dsn")
        or DEFAULT_DATABASE_URL
    )
    auto_migrate_text = (
        _env("AUTO_APPLY_MIGRATIONS")
        or _read_config_file("database.auto_apply_migrations")
        or _base("database.auto_apply_migrations", "true")
    )

    # Assessment engine
    allow_forward_text = (
        _env("ALLOW_FORWARD_DEPENDENCIES")
        or _read_config_file("assessment.allow_forward_dependencies")
        or _base("assessment.allow_forward_dependencies", "false")
    )
    max_sessions_text = (
        _env("MAX_PREVIEW_SESSIONS")
        or _read_config_file("assessment.max_preview_sessions")
        or _base("assessment.max_preview_sessions", str(DEFAULT_PREVIEW_SESSION_LIMIT))
    )

    # Sample data
    seed_enabled_text = _env("SEED_ENABLED") or _read_config_file("seed.enabled") or _base("seed.enabled", "false")
    job_count_text = _env("SEED_JOB_COUNT") or _read_config_file("seed.job_count") or _base("seed.job_count", "25")
    assessment_count_text = (
        _env("SEED_ASSESSMENT_COUNT")
        or _read_config_file("seed.assessment_count")
        or _base("seed.assessment_count", "3")
    )
    random_seed_text = _env("SEED_RANDOM_SEED") or _read_config_file("seed.random_seed") or _base("seed.random_seed", "42")

    try:
        cfg = AppConfig(
            database=DatabaseConfig(dsn=dsn, auto_apply_migrations=_flag(auto_migrate_text)),
            assessment=AssessmentConfig(
                allow_forward_dependencies=_flag(allow_forward_text),
                max_preview_sessions=str(max_sessions_text).strip(),
            ),
            seed=SeedConfig(
                enabled=_flag(seed_enabled_text),
                job_count=str(job_count_text).strip(),
                assessment_count=str(assessment_count_text).strip(),
                random_seed=str(random_seed_text).strip(),
            ),
        )
        return cfg
    except PydanticValidationError as e:
        logger.error("Invalid application configuration: %s", e)
        raise


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "AssessmentConfig",
    "SeedConfig",
    "config_from_request",
    "load_config",
]
