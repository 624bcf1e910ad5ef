"""CORS configuration helpers.

Provides a small utility for applying CORS with the ETag headers exposed so
browser clients can read them for change detection.
"""

from __future__ import annotations

from typing import Iterable

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from talentflow.logic.header_emitter import EXPOSE_HEADERS


def apply_cors(app: FastAPI, *, origins: Iterable[str] | None = None) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(origins or ["*"]),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=list(EXPOSE_HEADERS),
    )


__all__ = ["apply_cors"]
