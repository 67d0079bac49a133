"""One-shot escalation of a version conflict to an external decision maker."""

import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, TypeAlias
from uuid import UUID

from ..context import log_extra
from ..domain import (
    Abandoned,
    RecordNotFound,
    ResolutionOutcome,
    VersionConflict,
    VersionedRecord,
)
from ..domain.record import PROTECTED_FIELDS
from .mutation import Mutation, apply_mutation
from .session import ConcurrencyContext

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConflictReport:
    """What a resolution policy gets to see when a commit loses its race.

    Attributes:
        base: The record as fetched before the mutation was applied.
        attempted: The candidate that failed to commit.
        current: The record as it is stored now.
        conflict: The version conflict the commit returned.
    """

    base: VersionedRecord
    attempted: VersionedRecord
    current: VersionedRecord
    conflict: VersionConflict

    def attempted_changes(self) -> dict[str, Any]:
        """Fields the attempt changed relative to the record it started from."""
        return self.base.changed_fields(self.attempted)

    def concurrent_changes(self) -> dict[str, Any]:
        """Fields the winning writer(s) changed since the attempt started."""
        return self.base.changed_fields(self.current)


@dataclass(frozen=True)
class KeepExisting:
    """Decision: drop the attempted change and keep what is stored."""


@dataclass(frozen=True)
class ApplyMine:
    """Decision: write the given fields on top of the current stored record.

    Attributes:
        fields: Mutable record fields and the values to write.

    Examples:
        Re-apply only the window of the failed attempt:

        >>> ApplyMine({"start": report.attempted.start, "end": report.attempted.end})

        Re-apply everything the attempt changed:

        >>> ApplyMine.from_report(report)
    """

    fields: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if protected := PROTECTED_FIELDS.intersection(self.fields):
            raise ValueError(f"Cannot apply protected fields: {sorted(protected)}")
        if unknown := set(self.fields).difference(VersionedRecord.model_fields):
            raise ValueError(f"Cannot apply unknown fields: {sorted(unknown)}")
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    @classmethod
    def from_report(cls, report: ConflictReport) -> "ApplyMine":
        return cls(report.attempted_changes())


Decision: TypeAlias = KeepExisting | ApplyMine
ResolutionPolicy: TypeAlias = Callable[[ConflictReport], Decision | Awaitable[Decision]]


def keep_existing(report: ConflictReport) -> Decision:
    """Policy that always keeps the stored record."""
    return KeepExisting()


def apply_mine(report: ConflictReport) -> Decision:
    """Policy that re-applies whatever the failed attempt changed."""
    return ApplyMine.from_report(report)


class ManualResolutionCoordinator:
    """Attempt a commit once and escalate a conflict to a resolution policy.

    Unlike RetryCoordinator this never loops. A conflict produces a
    ConflictReport for the policy. KeepExisting ends the operation as
    Abandoned without touching the store. ApplyMine re-fetches the record,
    merges the chosen fields onto it and commits exactly once more; if that
    commit fails too, its outcome is returned to the caller as is.

    Examples:
        >>> coordinator = ManualResolutionCoordinator(context)
        >>> outcome = await coordinator.resolve(
        ...     record_id, shift_window(timedelta(hours=1)), apply_mine
        ... )
    """

    __slots__ = ("context",)

    def __init__(self, context: ConcurrencyContext):
        self.context = context

    async def resolve(
        self,
        record_id: UUID,
        mutation: Mutation,
        policy: ResolutionPolicy | None = None,
    ) -> ResolutionOutcome:
        """Apply ``mutation`` once, asking ``policy`` what to do on conflict.

        Args:
            record_id: The record to change.
            mutation: The change to apply to the fetched record.
            policy: Decides between keeping the stored record and applying
                the caller's fields. Defaults to the context's policy.

        Returns:
            Committed, Abandoned, or the failure of the last commit tried
            (VersionConflict, OverlapViolation or RecordNotFound).

        Raises:
            ValueError: If no policy is given and the context has none.
        """
        policy = policy or self.context.policy
        if policy is None:
            raise ValueError("A resolution policy is required")

        store = self.context.store
        base = await store.get(record_id)
        if base is None:
            return RecordNotFound(record_id)

        candidate = await apply_mutation(mutation, base.model_copy(deep=True))
        outcome = await store.commit(candidate, base.version)
        if not isinstance(outcome, VersionConflict):
            return outcome

        current = await store.get(record_id)
        if current is None:
            return RecordNotFound(record_id)

        report = ConflictReport(base=base, attempted=candidate, current=current, conflict=outcome)
        LOGGER.info(
            f"Escalating conflict to resolution policy: {outcome}",
            extra=log_extra(record_id=record_id),
        )
        decision = policy(report)
        if inspect.isawaitable(decision):
            decision = await decision

        if isinstance(decision, KeepExisting):
            LOGGER.info("Policy kept the existing record", extra=log_extra(record_id=record_id))
            return Abandoned(report)

        # The policy may have taken a while; merge onto whatever is stored now.
        latest = await store.get(record_id)
        if latest is None:
            return RecordNotFound(record_id)

        merged = latest.with_changes(**decision.fields)
        LOGGER.info(
            f"Policy applied {sorted(decision.fields)} onto version {latest.version}",
            extra=log_extra(record_id=record_id),
        )
        return await store.commit(merged, latest.version)
