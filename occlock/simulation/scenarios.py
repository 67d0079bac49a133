"""Mutations and actors for staging booking races.

The mutations reproduce the classic lost-update race on a single booking:
one party edits the subject slowly while another moves the window. The
actor factories wrap a mutation with the way it is pushed to the store.
"""

import asyncio
from datetime import timedelta
from uuid import UUID

from ..coordination import (
    ConcurrencyContext,
    ManualResolutionCoordinator,
    Mutation,
    ResolutionPolicy,
    RetryCoordinator,
    apply_mutation,
)
from ..domain import CommitOutcome, RecordNotFound, VersionedRecord
from .harness import Actor


def change_subject(subject: str, delay: float = 0.0) -> Mutation:
    """Mutation that sets the subject, optionally after a pause.

    The pause happens after the record was fetched and before the commit, so
    a non-zero delay lets faster actors commit first.
    """

    async def mutate(record: VersionedRecord) -> VersionedRecord:
        if delay:
            await asyncio.sleep(delay)
        return record.with_changes(subject=subject)

    return mutate


def shift_window(delta: timedelta) -> Mutation:
    """Mutation that moves the booking window by ``delta``."""

    def mutate(record: VersionedRecord) -> VersionedRecord:
        return record.shifted(delta)

    return mutate


def retrying_actor(
    name: str, record_id: UUID, mutation: Mutation, max_attempts: int | None = None
) -> Actor:
    async def operation(context: ConcurrencyContext):
        return await RetryCoordinator(context).execute_with_retry(
            record_id, mutation, max_attempts
        )

    return Actor(name=name, operation=operation)


def resolving_actor(
    name: str, record_id: UUID, mutation: Mutation, policy: ResolutionPolicy | None = None
) -> Actor:
    async def operation(context: ConcurrencyContext):
        return await ManualResolutionCoordinator(context).resolve(record_id, mutation, policy)

    return Actor(name=name, operation=operation)


def single_attempt_actor(name: str, record_id: UUID, mutation: Mutation) -> Actor:
    """Actor that fetches, mutates and commits once, with no conflict handling."""

    async def operation(context: ConcurrencyContext) -> CommitOutcome:
        record = await context.store.get(record_id)
        if record is None:
            return RecordNotFound(record_id)
        expected_version = record.version
        candidate = await apply_mutation(mutation, record)
        return await context.store.commit(candidate, expected_version)

    return Actor(name=name, operation=operation)
