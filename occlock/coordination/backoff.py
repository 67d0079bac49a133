"""Exponential backoff with additive jitter."""

import random


class ExponentialBackoff:
    """Compute the pause before the next attempt after a conflict.

    For attempt ``k`` (1-indexed) the delay is
    ``base_ms * 2**(k - 1) + jitter`` with ``jitter`` drawn uniformly from
    ``[0, jitter_max_ms)``. Randomizing the pause keeps actors that lost the
    same round from retrying in lockstep.

    Attributes:
        base_ms: Delay before the first retry, in milliseconds.
        jitter_max_ms: Exclusive upper bound of the random part.
        rng: Source of randomness. Pass a seeded ``random.Random`` for
            reproducible delays.

    Examples:
        >>> backoff = ExponentialBackoff(base_ms=100, jitter_max_ms=100)
        >>> 400 <= backoff.delay_ms(3) < 500
        True
    """

    __slots__ = ("base_ms", "jitter_max_ms", "rng")

    def __init__(self, base_ms: float, jitter_max_ms: float, rng: random.Random | None = None):
        if base_ms < 0:
            raise ValueError("base_ms must be non-negative")
        if jitter_max_ms < 0:
            raise ValueError("jitter_max_ms must be non-negative")
        self.base_ms = base_ms
        self.jitter_max_ms = jitter_max_ms
        self.rng = rng or random.Random()

    def delay_ms(self, attempt: int) -> float:
        """Delay in milliseconds after the given failed attempt.

        Raises:
            ValueError: If attempt is lower than 1.
        """
        if attempt < 1:
            raise ValueError("attempt must be at least 1")
        # random() is in [0, 1), which keeps the jitter strictly below its bound.
        return self.base_ms * 2 ** (attempt - 1) + self.rng.random() * self.jitter_max_ms

    def delay(self, attempt: int) -> float:
        """Delay in seconds, ready for ``asyncio.sleep``."""
        return self.delay_ms(attempt) / 1000
