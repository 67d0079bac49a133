"""occlock - Optimistic concurrency control for shared booking records.

This module provides the public API: versioned records, a compare-and-commit
store, and the coordinators that react when a commit loses its race.
"""

from .coordination import (
    ApplyMine,
    ConcurrencyContext,
    ConflictReport,
    KeepExisting,
    ManualResolutionCoordinator,
    RetryCoordinator,
    RetrySettings,
    apply_mine,
    keep_existing,
)
from .domain import (
    Abandoned,
    Committed,
    Deleted,
    InterruptedDuringWait,
    MaxRetriesExceeded,
    OverlapViolation,
    RecordNotFound,
    VersionConflict,
    VersionedRecord,
    overlaps,
)
from .simulation import ConcurrencySimulation
from .store import InMemoryRecordStore, RecordStore

__all__ = [
    # Records and storage
    "VersionedRecord",
    "RecordStore",
    "InMemoryRecordStore",
    "overlaps",
    # Coordination
    "ConcurrencyContext",
    "RetrySettings",
    "RetryCoordinator",
    "ManualResolutionCoordinator",
    "ConflictReport",
    "KeepExisting",
    "ApplyMine",
    "keep_existing",
    "apply_mine",
    "ConcurrencySimulation",
    # Outcomes
    "Committed",
    "Deleted",
    "VersionConflict",
    "OverlapViolation",
    "RecordNotFound",
    "MaxRetriesExceeded",
    "Abandoned",
    "InterruptedDuringWait",
]
