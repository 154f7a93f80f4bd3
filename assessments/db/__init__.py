"""Database bootstrap utilities.

Exposes the shared Engine and the SQL migrations runner used at startup and
by the test bootstrap.
"""

from assessments.db.base import get_engine
from assessments.db.migrations_runner import apply_migrations

__all__ = [
    "get_engine",
    "apply_migrations",
]
