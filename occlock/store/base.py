"""Record store interface: the only durability boundary of the engine."""

from abc import ABC, abstractmethod
from uuid import UUID

from ..domain import (
    AddOutcome,
    CommitOutcome,
    DeleteOutcome,
    VersionedRecord,
)


class RecordStore(ABC):
    """Abstract interface for durable, version-checked record storage.

    The store exclusively owns the durable copy of each record and its
    version counter. Callers only ever receive copies.

    Key responsibilities:
    - **Compare-and-commit**: A write lands only if the caller's expected
      version still matches the stored version.
    - **No-overlap rule**: Bookings on one resource never intersect.
    - **Atomicity**: The version check, the overlap check and the write run
      as one critical section. Checking the two in separate round trips lets
      two candidates each pass validation before either lands, after which
      both land and the rule is broken.
    - **Ordering**: Commits to one record are totally ordered by version.
    """

    @abstractmethod
    async def get(self, record_id: UUID) -> VersionedRecord | None:
        """Fetch a copy of the current stored record.

        Args:
            record_id: The record to fetch.

        Returns:
            A copy of the record, or None if it does not exist.
        """
        ...

    @abstractmethod
    async def commit(self, candidate: VersionedRecord, expected_version: int) -> CommitOutcome:
        """Write a candidate if the stored version still matches.

        Atomically: re-read the stored version, compare it with
        ``expected_version``, check the candidate against the other records
        currently booked on its resource, and only then apply the
        candidate's fields and increment the version by one.

        Args:
            candidate: The proposed new state. Its ``id`` selects the record;
                its ``version`` is ignored.
            expected_version: The version the candidate was derived from.

        Returns:
            Committed with the stored copy on success. VersionConflict,
            OverlapViolation or RecordNotFound otherwise, with nothing
            written.
        """
        ...

    @abstractmethod
    async def add(self, record: VersionedRecord) -> AddOutcome:
        """Insert a new record at version 0.

        The overlap rule is checked in the same critical section as the
        insert.

        Raises:
            ValueError: If a record with the same id already exists.
        """
        ...

    @abstractmethod
    async def delete(self, record_id: UUID, expected_version: int) -> DeleteOutcome:
        """Remove a record if it was not modified since ``expected_version``."""
        ...

    @abstractmethod
    async def list_records(self, resource_id: UUID | None = None) -> list[VersionedRecord]:
        """Return copies of all records, optionally only those on one resource."""
        ...

    async def on_startup(self) -> None:
        """Called when a ConcurrencyContext using this store is entered."""
        pass

    async def on_shutdown(self) -> None:
        """Called when a ConcurrencyContext using this store is exited."""
        pass
