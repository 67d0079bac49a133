"""Typed results of store and coordinator operations.

Conflicts are reported as values rather than raised, so a caller has to
look at what came back before it can move on. Every outcome exposes ``ok``;
use ``isinstance`` or ``match`` to tell the failure kinds apart.

Examples:
    >>> outcome = await store.commit(candidate, expected_version=0)
    >>> match outcome:
    ...     case Committed(record=record):
    ...         print(f"now at version {record.version}")
    ...     case VersionConflict(expected=expected, actual=actual):
    ...         print(f"lost the race: expected {expected}, found {actual}")
    ...     case OverlapViolation():
    ...         print("window clashes with another booking")
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar, TypeAlias
from uuid import UUID

from .record import VersionedRecord

if TYPE_CHECKING:
    from ..coordination.resolution import ConflictReport


@dataclass(frozen=True)
class Committed:
    """A write landed. ``record`` is a copy of what the store now holds."""

    record: VersionedRecord
    ok: ClassVar[bool] = True

    @property
    def version(self) -> int:
        return self.record.version


@dataclass(frozen=True)
class Deleted:
    """A version-checked delete removed the record."""

    record_id: UUID
    version: int
    ok: ClassVar[bool] = True


@dataclass(frozen=True)
class VersionConflict:
    """The stored version moved on since the caller read the record.

    Attributes:
        record_id: The record that was being written.
        expected: The version the caller based its change on.
        actual: The version found in the store at commit time.
    """

    record_id: UUID
    expected: int
    actual: int
    ok: ClassVar[bool] = False

    def __str__(self) -> str:
        return (
            f"Expected version {self.expected}, got {self.actual} for record {self.record_id}"
        )


@dataclass(frozen=True)
class OverlapViolation:
    """The candidate's window intersects other bookings on the same resource.

    Attributes:
        record_id: The record that was being written.
        resource_id: The resource both bookings target.
        conflicting_ids: Ids of the committed records that clash.
    """

    record_id: UUID
    resource_id: UUID
    conflicting_ids: tuple[UUID, ...] = field(default_factory=tuple)
    ok: ClassVar[bool] = False

    def __str__(self) -> str:
        clashes = ", ".join(str(record_id) for record_id in self.conflicting_ids)
        return f"Record {self.record_id} overlaps {clashes} on resource {self.resource_id}"


@dataclass(frozen=True)
class RecordNotFound:
    record_id: UUID
    ok: ClassVar[bool] = False

    def __str__(self) -> str:
        return f"Record {self.record_id} not found"


@dataclass(frozen=True)
class MaxRetriesExceeded:
    """Automatic retries ran out while conflicts kept happening.

    Attributes:
        last_conflict: The conflict reported by the final attempt.
        attempts: How many attempts were made in total.
    """

    last_conflict: VersionConflict
    attempts: int
    ok: ClassVar[bool] = False

    def __str__(self) -> str:
        return f"Max attempts ({self.attempts}) reached: {self.last_conflict}"


@dataclass(frozen=True)
class Abandoned:
    """The resolution policy chose to keep the stored record as it is."""

    report: "ConflictReport"
    ok: ClassVar[bool] = False


CommitOutcome: TypeAlias = Committed | VersionConflict | OverlapViolation | RecordNotFound
AddOutcome: TypeAlias = Committed | OverlapViolation
DeleteOutcome: TypeAlias = Deleted | VersionConflict | RecordNotFound
RetryOutcome: TypeAlias = Committed | MaxRetriesExceeded | OverlapViolation | RecordNotFound
ResolutionOutcome: TypeAlias = (
    Committed | Abandoned | VersionConflict | OverlapViolation | RecordNotFound
)
