"""Pytest fixtures for MongoDB integration tests."""

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio

from occlock.integrations.mongodb import MongoConfiguration, MongoRecordStore

# Assumes a single-node replica set is running locally on port 27017
LOCAL_MONGO_URI = "mongodb://localhost:27017/?replicaSet=rs0&directConnection=true"


@pytest_asyncio.fixture
async def mongo_config(request: pytest.FixtureRequest) -> AsyncIterator[MongoConfiguration]:
    """Create a MongoConfiguration pointing to a fresh local database."""
    db_name = f"test_{request.node.name}"[:63]
    config = MongoConfiguration(uri=LOCAL_MONGO_URI, database=db_name)
    await config.client.drop_database(config.database)
    try:
        yield config
    finally:
        if "client" in config.__dict__:
            await config.client.drop_database(config.database)
            await config.close()


@pytest_asyncio.fixture
async def mongo_store(mongo_config: MongoConfiguration) -> MongoRecordStore:
    store = MongoRecordStore(mongo_config)
    await store.on_startup()
    return store
