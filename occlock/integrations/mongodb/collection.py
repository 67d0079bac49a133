"""MongoDB collection wrapper with index management and session-aware helpers.

This module provides an IndexedCollection class that wraps a MongoDB
AsyncCollection with index management and helper methods for the query
patterns the record store needs. Every operation accepts an optional
session so it can take part in a multi-document transaction.
"""

from collections.abc import AsyncIterator
from enum import IntEnum
from typing import Any

from pydantic import BaseModel
from pymongo import ASCENDING, DESCENDING
from pymongo.asynchronous.client_session import AsyncClientSession
from pymongo.asynchronous.collection import AsyncCollection


class IndexDirection(IntEnum):
    """Sort direction for MongoDB index fields."""

    ASC = ASCENDING
    """Ascending order (1)."""

    DESC = DESCENDING
    """Descending order (-1)."""


class IndexSpec(BaseModel):
    """Specification for a MongoDB index.

    Example:
        >>> IndexSpec(keys=[("resource_id", IndexDirection.ASC), ("start", IndexDirection.ASC)])
    """

    model_config = {"arbitrary_types_allowed": True}

    keys: list[tuple[str, IndexDirection]]
    """(field_name, direction) tuples."""

    unique: bool = False
    """If True, enforce uniqueness."""

    async def apply(self, collection: AsyncCollection[dict[str, Any]]) -> None:
        kwargs: dict[str, Any] = {}
        if self.unique:
            kwargs["unique"] = True
        await collection.create_index(self.keys, **kwargs)


class IndexedCollection:
    """MongoDB collection wrapper with index management.

    Indexes are not created lazily here: index builds cannot run inside a
    transaction, so ``ensure_indexes`` is called once at startup.

    Example:
        >>> collection = IndexedCollection(
        ...     config.records,
        ...     indexes=[IndexSpec(keys=[("resource_id", IndexDirection.ASC)])],
        ... )
        >>> await collection.ensure_indexes()
        >>> doc = await collection.find_one({"_id": "..."}, session=session)
    """

    def __init__(
        self,
        collection: AsyncCollection[dict[str, Any]],
        indexes: list[IndexSpec] | None = None,
    ) -> None:
        self._collection = collection
        self._indexes = indexes or []
        self._indexes_created = False

    async def ensure_indexes(self) -> None:
        """Create indexes if not already created."""
        if self._indexes_created:
            return

        for spec in self._indexes:
            await spec.apply(self._collection)

        self._indexes_created = True

    async def find_one(
        self,
        filter: dict[str, Any],
        session: AsyncClientSession | None = None,
    ) -> dict[str, Any] | None:
        result: dict[str, Any] | None = await self._collection.find_one(filter, session=session)
        return result

    async def find(
        self,
        filter: dict[str, Any],
        session: AsyncClientSession | None = None,
    ) -> AsyncIterator[dict[str, Any]]:
        async for doc in self._collection.find(filter, session=session):
            yield doc

    async def insert_one(
        self,
        document: dict[str, Any],
        session: AsyncClientSession | None = None,
    ) -> None:
        await self._collection.insert_one(document, session=session)

    async def update_one(
        self,
        filter: dict[str, Any],
        update: dict[str, Any],
        upsert: bool = False,
        session: AsyncClientSession | None = None,
    ) -> int:
        """Update a single document.

        Returns:
            The number of documents matched by the filter (0 or 1).
        """
        result = await self._collection.update_one(filter, update, upsert=upsert, session=session)
        return result.matched_count

    async def delete_one(
        self,
        filter: dict[str, Any],
        session: AsyncClientSession | None = None,
    ) -> int:
        """Delete a single document and return how many were deleted."""
        result = await self._collection.delete_one(filter, session=session)
        return result.deleted_count
