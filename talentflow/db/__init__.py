"""Database bootstrap utilities for the TalentFlow assessment service.

Exposes engine construction and the migrations runner that applies the SQL
files packaged under ``talentflow/db/migrations``. The DB layer does not leak
ORM models into route handlers.
"""

from talentflow.db.base import get_engine, reset_engine
from talentflow.db.migrations_runner import apply_migrations

__all__ = [
    "get_engine",
    "reset_engine",
    "apply_migrations",
]
