"""In-memory reference implementation of the record store."""

import asyncio
import logging
from uuid import UUID

from ..context import log_extra
from ..domain import (
    AddOutcome,
    CommitOutcome,
    Committed,
    Deleted,
    DeleteOutcome,
    OverlapViolation,
    RecordNotFound,
    VersionConflict,
    VersionedRecord,
    conflicting_records,
)
from .base import RecordStore

LOGGER = logging.getLogger(__name__)


class InMemoryRecordStore(RecordStore):
    """Dictionary-based record store for tests, simulations and examples.

    A single ``asyncio.Lock`` guards every mutating operation, which makes the
    version check, the overlap check and the write one critical section for
    every record and resource at once. Reads take no lock.

    Records are deep-copied on the way in and on the way out, so callers can
    freely mutate what they were given without touching the durable copy.

    This implementation is suitable for:
    - Unit tests (fast, no external dependencies)
    - Concurrency simulations, where ``latency`` widens the race windows

    **NOT suitable for production**: nothing survives a restart and the lock
    only coordinates tasks on one event loop.

    Attributes:
        latency: Seconds to await inside the critical section between reading
            the stored state and writing, mimicking a database round trip.
    """

    def __init__(self, latency: float = 0.0) -> None:
        if latency < 0:
            raise ValueError("latency must be non-negative")
        self.latency = latency
        self.by_id: dict[UUID, VersionedRecord] = {}
        self._lock = asyncio.Lock()

    async def get(self, record_id: UUID) -> VersionedRecord | None:
        if (record := self.by_id.get(record_id)) is None:
            return None
        return record.model_copy(deep=True)

    async def commit(self, candidate: VersionedRecord, expected_version: int) -> CommitOutcome:
        async with self._lock:
            stored = self.by_id.get(candidate.id)
            if stored is None:
                return RecordNotFound(candidate.id)

            if stored.version != expected_version:
                LOGGER.warning(
                    f"Rejected commit: expected version {expected_version}, got {stored.version}",
                    extra=log_extra(record_id=candidate.id),
                )
                return VersionConflict(candidate.id, expected_version, stored.version)

            if violation := self._check_overlap(candidate):
                return violation

            await self._simulate_latency()

            committed = candidate.model_copy(update={"version": stored.version + 1}, deep=True)
            self.by_id[committed.id] = committed

        LOGGER.debug(
            "Committed record",
            extra=log_extra(record_id=committed.id, version=committed.version),
        )
        return Committed(committed.model_copy(deep=True))

    async def add(self, record: VersionedRecord) -> AddOutcome:
        async with self._lock:
            if record.id in self.by_id:
                raise ValueError(f"Record {record.id} already exists")

            if violation := self._check_overlap(record):
                return violation

            await self._simulate_latency()

            stored = record.model_copy(update={"version": 0}, deep=True)
            self.by_id[stored.id] = stored

        return Committed(stored.model_copy(deep=True))

    async def delete(self, record_id: UUID, expected_version: int) -> DeleteOutcome:
        async with self._lock:
            stored = self.by_id.get(record_id)
            if stored is None:
                return RecordNotFound(record_id)

            if stored.version != expected_version:
                return VersionConflict(record_id, expected_version, stored.version)

            await self._simulate_latency()
            del self.by_id[record_id]

        return Deleted(record_id, stored.version)

    async def list_records(self, resource_id: UUID | None = None) -> list[VersionedRecord]:
        return [
            record.model_copy(deep=True)
            for record in self.by_id.values()
            if resource_id is None or record.resource_id == resource_id
        ]

    def _check_overlap(self, candidate: VersionedRecord) -> OverlapViolation | None:
        # Must be called with the lock held.
        clashes = conflicting_records(candidate, self.by_id.values())
        if not clashes:
            return None
        LOGGER.warning(
            f"Rejected write: window overlaps {len(clashes)} booking(s)",
            extra=log_extra(record_id=candidate.id, resource_id=candidate.resource_id),
        )
        return OverlapViolation(
            record_id=candidate.id,
            resource_id=candidate.resource_id,
            conflicting_ids=tuple(clash.id for clash in clashes),
        )

    async def _simulate_latency(self) -> None:
        if self.latency:
            await asyncio.sleep(self.latency)
