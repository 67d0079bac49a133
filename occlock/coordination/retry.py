"""Automatic retry of record mutations that lose optimistic concurrency races."""

import asyncio
import logging
from uuid import UUID

from ..context import log_extra
from ..domain import (
    Committed,
    InterruptedDuringWait,
    MaxRetriesExceeded,
    RecordNotFound,
    RetryOutcome,
    VersionConflict,
)
from .mutation import Mutation, apply_mutation
from .session import ConcurrencyContext

LOGGER = logging.getLogger(__name__)


class RetryCoordinator:
    """Re-run a mutation against fresh state until it commits or attempts run out.

    Every attempt fetches the record anew, applies the mutation to that copy
    and commits with the fetched version as the expected version. Only a
    version conflict is retried; it is followed by an exponential backoff
    with jitter that suspends the calling task alone. Overlap violations and
    missing records end the operation at once.

    Attributes:
        context: Store handle, retry settings and sleep/random sources.

    Examples:
        Retry a subject change up to the configured number of attempts:

        >>> coordinator = RetryCoordinator(context)
        >>> outcome = await coordinator.execute_with_retry(
        ...     record_id, lambda record: record.with_changes(subject="Moved to A101")
        ... )
        >>> if isinstance(outcome, MaxRetriesExceeded):
        ...     print(f"gave up after {outcome.attempts} attempts")
    """

    __slots__ = ("context", "_backoff")

    def __init__(self, context: ConcurrencyContext):
        self.context = context
        self._backoff = context.backoff()

    async def execute_with_retry(
        self, record_id: UUID, mutation: Mutation, max_attempts: int | None = None
    ) -> RetryOutcome:
        """Apply ``mutation`` to the record, retrying on version conflicts.

        Args:
            record_id: The record to change.
            mutation: The change to apply. It may run once per attempt, each
                time against the freshest stored state.
            max_attempts: Maximum number of attempts (initial + retries).
                Defaults to the context's ``settings.max_retries``.

        Returns:
            Committed on success, MaxRetriesExceeded wrapping the last
            conflict when every attempt lost its race, or the OverlapViolation
            or RecordNotFound that stopped the operation.

        Raises:
            ValueError: If max_attempts is not positive.
            InterruptedDuringWait: If the task is cancelled during a backoff.
        """
        if max_attempts is None:
            max_attempts = self.context.settings.max_retries
        if max_attempts <= 0:
            raise ValueError("max_attempts must be positive")

        store = self.context.store
        attempt = 0
        while True:
            attempt += 1
            record = await store.get(record_id)
            if record is None:
                LOGGER.warning(
                    f"Record not found on attempt {attempt}/{max_attempts}",
                    extra=log_extra(record_id=record_id),
                )
                return RecordNotFound(record_id)

            expected_version = record.version
            candidate = await apply_mutation(mutation, record)
            outcome = await store.commit(candidate, expected_version)

            if isinstance(outcome, Committed):
                LOGGER.info(
                    f"Committed after {attempt} attempt(s)",
                    extra=log_extra(record_id=record_id, version=outcome.version),
                )
                return outcome

            if not isinstance(outcome, VersionConflict):
                # Overlaps and vanished records are not helped by trying again.
                return outcome

            LOGGER.warning(
                f"Version conflict on attempt {attempt}/{max_attempts}: {outcome}",
                extra=log_extra(record_id=record_id),
            )
            # Don't sleep after the last attempt
            if attempt == max_attempts:
                LOGGER.warning(
                    f"Max attempts ({max_attempts}) reached",
                    extra=log_extra(record_id=record_id),
                )
                return MaxRetriesExceeded(last_conflict=outcome, attempts=max_attempts)
            await self._pause(record_id, attempt)

    async def _pause(self, record_id: UUID, attempt: int) -> None:
        delay = self._backoff.delay(attempt)
        LOGGER.debug(
            f"Backing off {delay * 1000:.0f}ms before attempt {attempt + 1}",
            extra=log_extra(record_id=record_id),
        )
        try:
            await self.context.sleep(delay)
        except asyncio.CancelledError as exc:
            LOGGER.warning(
                f"Interrupted while backing off after attempt {attempt}",
                extra=log_extra(record_id=record_id),
            )
            raise InterruptedDuringWait(record_id, attempt) from exc
