"""Grade stores consumed by the curve engine."""

from .base import GradeStore, SubmissionRecord, ensure_valid_weights
from .database import Database, init_database
from .memory import InMemoryGradeStore
from .sql import SqlGradeStore

__all__ = [
    "Database",
    "GradeStore",
    "InMemoryGradeStore",
    "SqlGradeStore",
    "SubmissionRecord",
    "ensure_valid_weights",
    "init_database",
]
