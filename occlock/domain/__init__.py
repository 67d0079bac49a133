"""Domain primitives for optimistic concurrency over booking records.

- VersionedRecord: A booking with a version counter and a half-open window
- overlaps: The no-overlap rule for bookings on one resource
- Outcome values: Committed, VersionConflict, OverlapViolation, ...
- InterruptedDuringWait: Raised when a retry backoff is cancelled
"""

from .exceptions import InterruptedDuringWait
from .outcomes import (
    Abandoned,
    AddOutcome,
    CommitOutcome,
    Committed,
    Deleted,
    DeleteOutcome,
    MaxRetriesExceeded,
    OverlapViolation,
    RecordNotFound,
    ResolutionOutcome,
    RetryOutcome,
    VersionConflict,
)
from .overlap import conflicting_records, find_overlaps, intervals_overlap, overlaps
from .record import VersionedRecord, utc_now

__all__ = [
    "VersionedRecord",
    "utc_now",
    # Overlap rule
    "intervals_overlap",
    "overlaps",
    "conflicting_records",
    "find_overlaps",
    # Outcomes
    "Committed",
    "Deleted",
    "VersionConflict",
    "OverlapViolation",
    "RecordNotFound",
    "MaxRetriesExceeded",
    "Abandoned",
    "CommitOutcome",
    "AddOutcome",
    "DeleteOutcome",
    "RetryOutcome",
    "ResolutionOutcome",
    # Exceptions
    "InterruptedDuringWait",
]
