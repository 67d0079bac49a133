"""MongoDB integration for occlock.

This module provides a MongoDB implementation of the RecordStore interface
using the async PyMongo driver. Commits run in multi-document transactions,
so the server must be a replica set (a single node is fine).

Usage:
    >>> from occlock.integrations.mongodb import MongoConfiguration, MongoRecordStore
    >>>
    >>> config = MongoConfiguration(uri="mongodb://localhost:27017/?replicaSet=rs0")
    >>> async with ConcurrencyContext(store=MongoRecordStore(config)) as context:
    ...     await RetryCoordinator(context).execute_with_retry(record_id, mutation)
"""

from .collection import IndexDirection, IndexedCollection, IndexSpec
from .config import MongoConfiguration
from .record_store import MongoRecordStore, RecordDocument

__all__ = [
    "MongoConfiguration",
    "MongoRecordStore",
    "RecordDocument",
    "IndexedCollection",
    "IndexSpec",
    "IndexDirection",
]
