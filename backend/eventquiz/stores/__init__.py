"""Quiz data store backends."""

from .base import LookupStatus, QuizDataStore, QuizLookup
from .memory_store import MemoryQuizStore
from .remote_store import RemoteQuizStore
from .sql_store import SqlQuizStore

__all__ = [
    "LookupStatus",
    "MemoryQuizStore",
    "QuizDataStore",
    "QuizLookup",
    "RemoteQuizStore",
    "SqlQuizStore",
]
