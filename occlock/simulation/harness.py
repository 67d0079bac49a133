"""Run concurrent actors against shared records under maximum contention."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from ..context import ExecutionContext, log_extra, set_context
from ..coordination import ConcurrencyContext
from ..domain import VersionedRecord, find_overlaps

LOGGER = logging.getLogger(__name__)

Operation = Callable[[ConcurrencyContext], Awaitable[Any]]


@dataclass(frozen=True)
class Actor:
    """One concurrent participant in a simulation.

    Attributes:
        name: Label used in reports and log lines.
        operation: Coroutine function run once the barrier opens. It gets the
            shared context and returns an outcome value.
    """

    name: str
    operation: Operation


@dataclass(frozen=True)
class ActorReport:
    """What happened to one actor.

    Attributes:
        name: The actor's name.
        outcome: The value its operation returned, if it returned.
        error: The exception its operation raised, if it raised.
    """

    name: str
    outcome: Any = None
    error: Exception | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and bool(getattr(self.outcome, "ok", False))


@dataclass(frozen=True)
class SimulationReport:
    """Final state after every actor has finished.

    Attributes:
        actors: One report per actor, in the order the actors were given.
        records: Final committed records by id.
        overlaps: Pairs of records that violate the no-overlap rule. Empty
            whenever the store kept its invariant.
    """

    actors: list[ActorReport]
    records: dict[UUID, VersionedRecord]
    overlaps: list[tuple[VersionedRecord, VersionedRecord]]

    @property
    def invariant_holds(self) -> bool:
        return not self.overlaps

    @property
    def winners(self) -> list[str]:
        return [report.name for report in self.actors if report.succeeded]

    def for_actor(self, name: str) -> ActorReport:
        for report in self.actors:
            if report.name == name:
                return report
        raise KeyError(name)


class ConcurrencySimulation:
    """Release a group of actors at the same instant and collect the results.

    The simulation adds no retry or resolution behavior of its own. Actors
    bring their own operations, typically built on RetryCoordinator or
    ManualResolutionCoordinator, and the simulation only arranges for them to
    collide. An ``asyncio.Barrier`` holds every actor until all of them are
    ready, then each runs under its own ExecutionContext.

    Exceptions raised by an operation are captured in that actor's report.
    Cancellation, including InterruptedDuringWait, is not captured and
    reaches the caller of ``run``.

    Examples:
        >>> simulation = ConcurrencySimulation(context)
        >>> report = await simulation.run([
        ...     retrying_actor("A", record_id, change_subject("X", delay=0.05)),
        ...     retrying_actor("B", record_id, shift_window(timedelta(hours=1))),
        ... ])
        >>> report.invariant_holds
        True
    """

    __slots__ = ("context",)

    def __init__(self, context: ConcurrencyContext):
        self.context = context

    async def run(self, actors: Sequence[Actor]) -> SimulationReport:
        """Run all actors concurrently and report the final committed state.

        Every actor has finished by the time this returns or raises, so no
        actor writes to the store afterwards.

        Raises:
            ValueError: If no actors are given or two actors share a name.
            asyncio.CancelledError: If an actor was cancelled, e.g. with
                InterruptedDuringWait. The first such error is re-raised once
                all other actors are done.
        """
        if not actors:
            raise ValueError("At least one actor is required")
        names = [actor.name for actor in actors]
        if len(set(names)) != len(names):
            raise ValueError("Actor names must be unique")

        barrier = asyncio.Barrier(len(actors))
        LOGGER.info(f"Starting simulation with {len(actors)} actor(s)")

        tasks = [
            asyncio.create_task(self._run_actor(actor, barrier), name=actor.name)
            for actor in actors
        ]
        try:
            await asyncio.wait(tasks)
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            await asyncio.wait(tasks)
            raise

        interrupted = [task for task in tasks if task.cancelled()]
        if interrupted:
            LOGGER.warning(
                f"Simulation interrupted: {len(interrupted)} actor(s) cancelled, "
                f"including {interrupted[0].get_name()}"
            )
            # result() of a cancelled task raises its CancelledError.
            interrupted[0].result()
        reports = [task.result() for task in tasks]

        records = await self.context.store.list_records()
        overlaps = find_overlaps(records)
        if overlaps:
            LOGGER.error(f"Simulation ended with {len(overlaps)} overlapping pair(s)")
        return SimulationReport(
            actors=list(reports),
            records={record.id: record for record in records},
            overlaps=overlaps,
        )

    async def _run_actor(self, actor: Actor, barrier: asyncio.Barrier) -> ActorReport:
        # Each actor runs in its own task, so this context stays local.
        set_context(ExecutionContext.create(actor=actor.name))
        await barrier.wait()
        try:
            outcome = await actor.operation(self.context)
        except Exception as exc:
            LOGGER.exception("Actor failed", extra=log_extra())
            return ActorReport(name=actor.name, error=exc)

        LOGGER.info(f"Actor finished with {type(outcome).__name__}", extra=log_extra())
        return ActorReport(name=actor.name, outcome=outcome)
