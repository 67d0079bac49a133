"""Central test fixtures."""

import random
from collections.abc import Callable
from datetime import datetime, timezone
from uuid import UUID, uuid4

import pytest
import pytest_asyncio

from occlock.coordination import ConcurrencyContext, RetrySettings
from occlock.domain import VersionedRecord
from occlock.store import InMemoryRecordStore
from occlock.testing import RecordingSleep

DAY = datetime(2025, 3, 14, tzinfo=timezone.utc)


def at(hour: int, minute: int = 0) -> datetime:
    return DAY.replace(hour=hour, minute=minute)


@pytest.fixture
def resource_id() -> UUID:
    """Generate a unique resource (room) ID."""
    return uuid4()


@pytest.fixture
def make_record(resource_id: UUID) -> Callable[..., VersionedRecord]:
    """Factory for records on the shared resource, windows given in hours."""

    def make(
        start_hour: int,
        end_hour: int,
        subject: str = "Team meeting",
        resource: UUID | None = None,
    ) -> VersionedRecord:
        return VersionedRecord(
            resource_id=resource or resource_id,
            owner_id=uuid4(),
            start=at(start_hour),
            end=at(end_hour),
            subject=subject,
        )

    return make


@pytest.fixture
def store() -> InMemoryRecordStore:
    """Create an in-memory record store."""
    return InMemoryRecordStore()


@pytest_asyncio.fixture
async def booking(store: InMemoryRecordStore, make_record) -> VersionedRecord:
    """A committed booking from 10:00 to 12:00 at version 0."""
    outcome = await store.add(make_record(10, 12))
    return outcome.record


@pytest.fixture
def settings() -> RetrySettings:
    return RetrySettings(max_retries=3, base_backoff_ms=100, jitter_max_ms=100)


@pytest.fixture
def sleep() -> RecordingSleep:
    """Sleep double that records backoff delays instead of waiting."""
    return RecordingSleep()


@pytest.fixture
def context(
    store: InMemoryRecordStore, settings: RetrySettings, sleep: RecordingSleep
) -> ConcurrencyContext:
    return ConcurrencyContext(store=store, settings=settings, rng=random.Random(7), sleep=sleep)


@pytest.fixture(autouse=True)
def clear_execution_context():
    """Automatically clear execution context after each test."""
    yield
    from occlock.context import clear_context

    clear_context()


@pytest.fixture
def at_hour() -> Callable[..., datetime]:
    """Build an aware datetime on the test day."""
    return at
