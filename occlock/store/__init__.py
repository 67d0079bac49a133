"""Record storage with compare-and-commit semantics."""

from .base import RecordStore
from .memory import InMemoryRecordStore

__all__ = [
    "RecordStore",
    "InMemoryRecordStore",
]
