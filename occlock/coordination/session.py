"""Explicit context object handed to coordinators."""

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from types import TracebackType
from typing import TYPE_CHECKING

from typing_extensions import Self

from ..store import RecordStore
from .backoff import ExponentialBackoff
from .config import RetrySettings

if TYPE_CHECKING:
    from .resolution import ResolutionPolicy

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class ConcurrencyContext:
    """Everything a coordinator needs, passed in rather than looked up globally.

    The context owns nothing by itself; it bundles the store handle, the
    retry configuration, the default resolution policy and the sources of
    time and randomness. Used as an async context manager it runs the
    store's startup and shutdown hooks, so the store's lifetime is scoped to
    the caller.

    Attributes:
        store: The shared record store. The only shared mutable state.
        settings: Bounds and pacing for automatic retries.
        policy: Default policy for manual conflict resolution, if any.
        rng: Randomness for backoff jitter.
        sleep: Coroutine used to pause between attempts. Swap it for a
            recording double in tests.

    Examples:
        >>> async with ConcurrencyContext(store=InMemoryRecordStore()) as context:
        ...     outcome = await RetryCoordinator(context).execute_with_retry(
        ...         record_id, lambda record: record.with_changes(subject="Board review")
        ...     )
    """

    store: RecordStore
    settings: RetrySettings = field(default_factory=RetrySettings)
    policy: "ResolutionPolicy | None" = None
    rng: random.Random = field(default_factory=random.Random)
    sleep: Sleep = asyncio.sleep

    def backoff(self) -> ExponentialBackoff:
        return ExponentialBackoff(
            base_ms=self.settings.base_backoff_ms,
            jitter_max_ms=self.settings.jitter_max_ms,
            rng=self.rng,
        )

    async def __aenter__(self) -> Self:
        await self.store.on_startup()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.store.on_shutdown()
