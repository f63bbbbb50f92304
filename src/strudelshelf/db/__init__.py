"""strudelshelf local sample catalog (sqlite)."""

from strudelshelf.db.connection import Database
from strudelshelf.db.migrations import MIGRATIONS, run_migrations
from strudelshelf.db.repository import DuplicateSampleError, SampleRepository
from strudelshelf.db.schema import initialize

__all__ = [
    "Database",
    "DuplicateSampleError",
    "MIGRATIONS",
    "SampleRepository",
    "initialize",
    "run_migrations",
]
