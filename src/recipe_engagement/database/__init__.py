"""Recipe store on PostgreSQL.

The pool and schema helpers are re-exported here; the repositories live in
``recipe_engagement.database.repositories``. Driver failures reach callers
only as ``StoreError`` subclasses.
"""

from recipe_engagement.database.connection import (
    check_database_health,
    close_database_pool,
    get_database_pool,
    init_database_pool,
)
from recipe_engagement.database.exceptions import (
    StoreConstraintError,
    StoreError,
    StoreReferenceError,
    StoreUnavailableError,
)
from recipe_engagement.database.schema import ensure_schema


__all__ = [
    "StoreConstraintError",
    "StoreError",
    "StoreReferenceError",
    "StoreUnavailableError",
    "check_database_health",
    "close_database_pool",
    "ensure_schema",
    "get_database_pool",
    "init_database_pool",
]
