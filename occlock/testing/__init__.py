"""Test doubles for exercising coordinators without real time or real people.

- RecordingSleep: Stands in for ``asyncio.sleep`` and records the delays
- ScriptedPolicy: Resolution policy that replays queued decisions
- ContendedStore: In-memory store where a rival writer wins chosen commits
"""

import asyncio
from collections import deque
from collections.abc import Iterable
from uuid import UUID

from occlock.coordination import ConflictReport, Decision, Mutation, apply_mutation
from occlock.domain import CommitOutcome, VersionedRecord
from occlock.store import InMemoryRecordStore


class RecordingSleep:
    """Sleep replacement that records every requested delay.

    Args:
        interrupt_on: 1-indexed call number on which to raise
            ``asyncio.CancelledError`` instead of returning, simulating a
            cancelled backoff.
        passthrough: If True, yield to the event loop with ``asyncio.sleep(0)``
            so other tasks get a chance to run.

    Examples:
        >>> sleep = RecordingSleep()
        >>> context = ConcurrencyContext(store=store, sleep=sleep)
        >>> await RetryCoordinator(context).execute_with_retry(record_id, mutation)
        >>> sleep.delays
        [0.1234]
    """

    def __init__(self, interrupt_on: int | None = None, passthrough: bool = True):
        self.delays: list[float] = []
        self.interrupt_on = interrupt_on
        self.passthrough = passthrough

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        if self.interrupt_on is not None and len(self.delays) == self.interrupt_on:
            raise asyncio.CancelledError()
        if self.passthrough:
            await asyncio.sleep(0)


class ScriptedPolicy:
    """Resolution policy that returns pre-arranged decisions in order.

    Every report it is shown is kept in ``reports`` for later assertions.

    Raises:
        AssertionError: When called more often than decisions were queued.
    """

    def __init__(self, decisions: Iterable[Decision]):
        self._decisions = deque(decisions)
        self.reports: list[ConflictReport] = []

    def __call__(self, report: ConflictReport) -> Decision:
        self.reports.append(report)
        if not self._decisions:
            raise AssertionError("ScriptedPolicy ran out of decisions")
        return self._decisions.popleft()


def _rival_edit(record: VersionedRecord) -> VersionedRecord:
    return record.with_changes(subject=f"rival edit {record.version + 1}")


class ContendedStore(InMemoryRecordStore):
    """In-memory store where a rival writer wins chosen commits.

    Right before the n-th call to ``commit`` (1-indexed) for every n in
    ``contend_on``, the rival mutation is applied to the stored record and
    committed first. The caller's commit then loses its race every time,
    without depending on task scheduling.

    Attributes:
        contend_on: Commit call numbers that a rival gets to beat.
        rival: Mutation the rival writer applies.
        commit_calls: Number of ``commit`` calls made by callers so far.
        rival_outcomes: Outcomes of the rival's own commits, in order.

    Examples:
        >>> store = ContendedStore(contend_on={1, 2})
        >>> outcome = await RetryCoordinator(context).execute_with_retry(record_id, mutation)
        >>> outcome.version  # two rival commits, then ours
        3
    """

    def __init__(
        self,
        contend_on: Iterable[int] = (1,),
        rival: Mutation = _rival_edit,
        latency: float = 0.0,
    ):
        super().__init__(latency=latency)
        self.contend_on = frozenset(contend_on)
        self.rival = rival
        self.commit_calls = 0
        self.rival_outcomes: list[CommitOutcome] = []

    async def commit(self, candidate: VersionedRecord, expected_version: int) -> CommitOutcome:
        self.commit_calls += 1
        if self.commit_calls in self.contend_on:
            await self._rival_commit(candidate.id)
        return await super().commit(candidate, expected_version)

    async def _rival_commit(self, record_id: UUID) -> None:
        current = await self.get(record_id)
        if current is None:
            return
        candidate = await apply_mutation(self.rival, current)
        self.rival_outcomes.append(await super().commit(candidate, current.version))
