"""MongoDB configuration using pydantic-settings."""

from functools import cached_property
from typing import Any

from pydantic_settings import BaseSettings
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.asynchronous.mongo_client import AsyncMongoClient


class MongoConfiguration(BaseSettings):
    """Configuration and factory for MongoDB resources.

    All settings can be configured via environment variables with the
    OCCLOCK_MONGO_ prefix. For example:
    - OCCLOCK_MONGO_URI=mongodb://localhost:27017/?replicaSet=rs0
    - OCCLOCK_MONGO_DATABASE=bookings

    The record store commits inside multi-document transactions, which
    MongoDB only offers on replica sets and sharded clusters. A single-node
    replica set is enough for development.

    Attributes:
        uri: MongoDB connection URI.
        database: Database name to use.
        records_collection: Collection name for versioned records.
        fences_collection: Collection name for per-resource commit fences.

    Example:
        >>> config = MongoConfiguration(database="bookings")
        >>> store = MongoRecordStore(config)
        >>> async with ConcurrencyContext(store=store) as context:
        ...     ...
    """

    uri: str = "mongodb://localhost:27017/?replicaSet=rs0"
    database: str = "occlock"

    records_collection: str = "records"
    fences_collection: str = "resource_fences"

    model_config = {"env_prefix": "OCCLOCK_MONGO_"}

    @cached_property
    def client(self) -> AsyncMongoClient[dict[str, Any]]:
        """Get the MongoDB async client.

        The client is lazily created and cached for reuse. Datetimes come
        back timezone-aware so they compare cleanly with record windows.
        """
        return AsyncMongoClient(self.uri, tz_aware=True)

    @cached_property
    def db(self) -> AsyncDatabase[dict[str, Any]]:
        return self.client[self.database]

    @cached_property
    def records(self) -> AsyncCollection[dict[str, Any]]:
        return self.db[self.records_collection]

    @cached_property
    def fences(self) -> AsyncCollection[dict[str, Any]]:
        return self.db[self.fences_collection]

    async def close(self) -> None:
        """Close the MongoDB client connection if it was created."""
        if "client" in self.__dict__:
            await self.client.close()
            for name in ("client", "db", "records", "fences"):
                self.__dict__.pop(name, None)
