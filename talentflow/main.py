from __future__ import annotations

import logging
from typing import Callable

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from sqlalchemy import text as sql_text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from talentflow.config import AppConfig, load_config
from talentflow.db.base import get_engine
from talentflow.db.migrations_runner import apply_migrations
from talentflow.http.problem import (
    handle_http_exception,
    handle_request_validation_error,
    handle_unexpected_error,
)
from talentflow.http.request_id import RequestIdMiddleware
from talentflow.logging_setup import configure_logging
from talentflow.logic.seed import seed_database
from talentflow.middleware.cors import apply_cors
from talentflow.routes import api_router

logger = logging.getLogger(__name__)


def _health_check(config: AppConfig) -> Callable[[], dict]:
    def check() -> dict:
        try:
            with get_engine(config.database.dsn).connect() as conn:
                conn.execute(sql_text("SELECT 1")).scalar()
            return {"status": "ok", "db": True}
        except SQLAlchemyError as e:
            logger.error("Health DB check failed", exc_info=True)
            return {"status": "degraded", "db": False, "reason": str(e)}

    return check


def create_app(config: AppConfig | None = None) -> FastAPI:
    """Build the assessment service application.

    ``config`` defaults to `talentflow.config.load_config()`. Migrations (and
    sample data when enabled) are applied on startup, not at import time.
    """
    configure_logging()
    cfg = config or load_config()

    app = FastAPI(title="TalentFlow Assessment Service")
    app.state.config = cfg

    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
    app.add_middleware(RequestIdMiddleware)
    apply_cors(app)

    @app.on_event("startup")
    def _apply_migrations() -> None:
        engine = get_engine(cfg.database.dsn)
        if not cfg.database.auto_apply_migrations:
            logger.info("AUTO_APPLY_MIGRATIONS disabled; skipping migrations at startup")
            return
        try:
            apply_migrations(engine)
        except SQLAlchemyError:
            logger.error("Failed to apply migrations at startup", exc_info=True)
            raise
        if cfg.seed.enabled:
            seed_database(cfg.seed.job_count, cfg.seed.assessment_count, cfg.seed.random_seed)

    # Routers
    app.include_router(api_router, prefix="/api/v1")

    health_check = _health_check(cfg)

    @app.get("/health")
    def health() -> dict:
        return health_check()

    logger.info(
        "app_created dialect_url_scheme=%s allow_forward_dependencies=%s seed_enabled=%s",
        cfg.database.dsn.split(":", 1)[0],
        cfg.assessment.allow_forward_dependencies,
        cfg.seed.enabled,
    )
    return app


__all__ = ["create_app"]
