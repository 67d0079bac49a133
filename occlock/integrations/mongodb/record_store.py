"""MongoDB implementation of RecordStore.

Each mutating call runs in a multi-document transaction. Inside it the store
increments a fence document for the target resource before it reads the
other bookings, so two transactions that write to the same resource always
write the same document. MongoDB lets only one of them commit; the loser is
aborted with a transient error and ``with_transaction`` runs it again
against the new state, where it sees the winner's booking.
"""

import logging
from datetime import datetime
from functools import partial
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field
from pymongo.asynchronous.client_session import AsyncClientSession

from occlock.context import log_extra
from occlock.domain import (
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
from occlock.store import RecordStore

from .collection import IndexDirection, IndexedCollection, IndexSpec
from .config import MongoConfiguration

LOGGER = logging.getLogger(__name__)


class RecordDocument(BaseModel):
    """Versioned record representation for MongoDB storage."""

    model_config = {"populate_by_name": True}

    id: str = Field(alias="_id")
    version: int
    resource_id: str
    owner_id: str | None = None
    start: datetime
    end: datetime
    subject: str = ""

    @classmethod
    def from_value(cls, record: VersionedRecord) -> "RecordDocument":
        return cls(
            id=str(record.id),
            version=record.version,
            resource_id=str(record.resource_id),
            owner_id=str(record.owner_id) if record.owner_id else None,
            start=record.start,
            end=record.end,
            subject=record.subject,
        )

    def to_value(self) -> VersionedRecord:
        return VersionedRecord(
            id=UUID(self.id),
            version=self.version,
            resource_id=UUID(self.resource_id),
            owner_id=UUID(self.owner_id) if self.owner_id else None,
            start=self.start,
            end=self.end,
            subject=self.subject,
        )

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)

    def to_update(self) -> dict[str, Any]:
        """Fields for a ``$set``; ``_id`` is immutable and left out."""
        return self.model_dump(exclude={"id"})


class MongoRecordStore(RecordStore):
    """Record store backed by MongoDB transactions.

    Collections:
        - records: One document per record, ``_id`` is the record id
        - resource_fences: One counter document per resource, bumped by
          every write that targets the resource

    Examples:
        >>> config = MongoConfiguration(uri="mongodb://localhost:27017/?replicaSet=rs0")
        >>> store = MongoRecordStore(config)
        >>> await store.on_startup()
        >>> outcome = await store.commit(candidate, expected_version=3)
    """

    def __init__(self, config: MongoConfiguration):
        self.config = config
        self._records = IndexedCollection(
            config.records,
            indexes=[
                IndexSpec(
                    keys=[
                        ("resource_id", IndexDirection.ASC),
                        ("start", IndexDirection.ASC),
                    ]
                ),
            ],
        )
        self._fences = IndexedCollection(config.fences)

    async def on_startup(self) -> None:
        await self._records.ensure_indexes()

    async def on_shutdown(self) -> None:
        await self.config.close()

    async def get(self, record_id: UUID) -> VersionedRecord | None:
        doc = await self._records.find_one({"_id": str(record_id)})
        if doc is None:
            return None
        return RecordDocument.model_validate(doc).to_value()

    async def list_records(self, resource_id: UUID | None = None) -> list[VersionedRecord]:
        filter_query: dict[str, Any] = {}
        if resource_id is not None:
            filter_query["resource_id"] = str(resource_id)
        return [
            RecordDocument.model_validate(doc).to_value()
            async for doc in self._records.find(filter_query)
        ]

    async def commit(self, candidate: VersionedRecord, expected_version: int) -> CommitOutcome:
        outcome: CommitOutcome = await self._in_transaction(
            partial(self._commit, candidate, expected_version)
        )
        if isinstance(outcome, VersionConflict):
            LOGGER.warning(
                f"Rejected commit: {outcome}", extra=log_extra(record_id=candidate.id)
            )
        return outcome

    async def add(self, record: VersionedRecord) -> AddOutcome:
        outcome: AddOutcome = await self._in_transaction(partial(self._add, record))
        return outcome

    async def delete(self, record_id: UUID, expected_version: int) -> DeleteOutcome:
        outcome: DeleteOutcome = await self._in_transaction(
            partial(self._delete, record_id, expected_version)
        )
        return outcome

    async def _in_transaction(self, callback: Any) -> Any:
        async with self.config.client.start_session() as session:
            return await session.with_transaction(callback)

    async def _commit(
        self, candidate: VersionedRecord, expected_version: int, session: AsyncClientSession
    ) -> CommitOutcome:
        stored = await self._records.find_one({"_id": str(candidate.id)}, session=session)
        if stored is None:
            return RecordNotFound(candidate.id)
        if stored["version"] != expected_version:
            return VersionConflict(candidate.id, expected_version, stored["version"])

        if violation := await self._check_overlap(candidate, session):
            return violation

        committed = candidate.model_copy(update={"version": expected_version + 1})
        matched = await self._records.update_one(
            {"_id": str(candidate.id), "version": expected_version},
            {"$set": RecordDocument.from_value(committed).to_update()},
            session=session,
        )
        if not matched:
            # Only reachable if the snapshot read raced a committed write.
            return VersionConflict(candidate.id, expected_version, expected_version + 1)

        LOGGER.debug(
            "Committed record",
            extra=log_extra(record_id=committed.id, version=committed.version),
        )
        return Committed(committed)

    async def _add(self, record: VersionedRecord, session: AsyncClientSession) -> AddOutcome:
        if await self._records.find_one({"_id": str(record.id)}, session=session):
            raise ValueError(f"Record {record.id} already exists")

        if violation := await self._check_overlap(record, session):
            return violation

        stored = record.model_copy(update={"version": 0})
        await self._records.insert_one(
            RecordDocument.from_value(stored).to_document(), session=session
        )
        return Committed(stored)

    async def _delete(
        self, record_id: UUID, expected_version: int, session: AsyncClientSession
    ) -> DeleteOutcome:
        stored = await self._records.find_one({"_id": str(record_id)}, session=session)
        if stored is None:
            return RecordNotFound(record_id)
        if stored["version"] != expected_version:
            return VersionConflict(record_id, expected_version, stored["version"])

        await self._records.delete_one(
            {"_id": str(record_id), "version": expected_version}, session=session
        )
        return Deleted(record_id, expected_version)

    async def _check_overlap(
        self, candidate: VersionedRecord, session: AsyncClientSession
    ) -> OverlapViolation | None:
        # The fence write makes concurrent writers on this resource conflict.
        await self._fences.update_one(
            {"_id": str(candidate.resource_id)},
            {"$inc": {"revision": 1}},
            upsert=True,
            session=session,
        )
        others = [
            RecordDocument.model_validate(doc).to_value()
            async for doc in self._records.find(
                {
                    "resource_id": str(candidate.resource_id),
                    "_id": {"$ne": str(candidate.id)},
                    "start": {"$lt": candidate.end},
                    "end": {"$gt": candidate.start},
                },
                session=session,
            )
        ]
        clashes = conflicting_records(candidate, others)
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
