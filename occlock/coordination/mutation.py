"""Mutations: functions that turn a freshly fetched record into a candidate."""

import inspect
from collections.abc import Awaitable, Callable
from typing import TypeAlias

from ..domain import VersionedRecord

Mutation: TypeAlias = Callable[
    [VersionedRecord],
    VersionedRecord | None | Awaitable[VersionedRecord | None],
]
"""A change to apply to a record.

The function receives a fresh copy of the record and either returns the
candidate or modifies the copy in place and returns None. It may be a
coroutine function.

A mutation may run several times, once per attempt, each time against
whatever the latest stored state is. It must therefore be expressed
relative to the record it is given (``record.shifted(timedelta(hours=1))``) and not
close over values read in an earlier attempt.
"""


async def apply_mutation(mutation: Mutation, record: VersionedRecord) -> VersionedRecord:
    """Run a mutation against a fetched copy and return a validated candidate.

    Args:
        mutation: The change to apply.
        record: A transient copy fetched from the store for this attempt.

    Returns:
        The candidate to commit. It carries the id of ``record``.

    Raises:
        ValueError: If the mutation produced a candidate for another record.
        pydantic.ValidationError: If the candidate is not a valid record,
            e.g. its window ends before it starts.
    """
    result = mutation(record)
    if inspect.isawaitable(result):
        result = await result
    candidate = record if result is None else result

    if candidate.id != record.id:
        raise ValueError(f"Mutation changed record id from {record.id} to {candidate.id}")

    # In-place edits bypass model validation, so validate the final state.
    return type(candidate).model_validate(candidate.model_dump())
