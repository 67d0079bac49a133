"""Tests for ExponentialBackoff."""

import random

import pytest

from occlock.coordination import ExponentialBackoff


def test_validates_base_non_negative():
    with pytest.raises(ValueError, match="base_ms must be non-negative"):
        ExponentialBackoff(base_ms=-1, jitter_max_ms=0)


def test_validates_jitter_non_negative():
    with pytest.raises(ValueError, match="jitter_max_ms must be non-negative"):
        ExponentialBackoff(base_ms=100, jitter_max_ms=-1)


def test_attempt_must_be_at_least_one():
    backoff = ExponentialBackoff(base_ms=100, jitter_max_ms=100)

    with pytest.raises(ValueError, match="attempt must be at least 1"):
        backoff.delay_ms(0)


@pytest.mark.parametrize("attempt", [1, 2, 3, 4, 5])
def test_delay_stays_within_bounds(attempt):
    """base*2^(k-1) <= delay < base*2^(k-1) + jitter for every draw."""
    backoff = ExponentialBackoff(base_ms=100, jitter_max_ms=100, rng=random.Random(attempt))
    floor = 100 * 2 ** (attempt - 1)

    for _ in range(200):
        delay = backoff.delay_ms(attempt)
        assert floor <= delay < floor + 100


def test_jitter_bound_is_exclusive_even_at_the_top():
    class TopOfRange(random.Random):
        def random(self) -> float:
            return 0.9999999999999999

    backoff = ExponentialBackoff(base_ms=100, jitter_max_ms=100, rng=TopOfRange())

    assert backoff.delay_ms(1) < 200


def test_zero_jitter_gives_exact_exponential_delays():
    backoff = ExponentialBackoff(base_ms=100, jitter_max_ms=0)

    assert [backoff.delay_ms(k) for k in (1, 2, 3, 4)] == [100, 200, 400, 800]


def test_delay_is_in_seconds():
    backoff = ExponentialBackoff(base_ms=250, jitter_max_ms=0)

    assert backoff.delay(1) == 0.25
    assert backoff.delay(2) == 0.5


def test_seeded_rng_is_reproducible():
    first = ExponentialBackoff(base_ms=100, jitter_max_ms=100, rng=random.Random(42))
    second = ExponentialBackoff(base_ms=100, jitter_max_ms=100, rng=random.Random(42))

    assert [first.delay_ms(k) for k in (1, 2, 3)] == [second.delay_ms(k) for k in (1, 2, 3)]
