"""Tests for the no-overlap rule."""

from datetime import timedelta
from uuid import uuid4

import pytest

from occlock.domain import conflicting_records, find_overlaps, intervals_overlap, overlaps


@pytest.mark.parametrize(
    ("a", "b", "expected"),
    [
        ((10, 12), (11, 13), True),
        ((10, 12), (9, 11), True),
        ((10, 12), (10, 12), True),
        ((10, 12), (10, 11), True),
        ((10, 12), (8, 14), True),
        ((10, 12), (12, 13), False),
        ((10, 12), (8, 10), False),
        ((10, 12), (13, 14), False),
    ],
)
def test_intervals_overlap_half_open(at_hour, a, b, expected):
    """Windows that only touch at an endpoint do not overlap."""
    result = intervals_overlap(at_hour(a[0]), at_hour(a[1]), at_hour(b[0]), at_hour(b[1]))

    assert result is expected
    # Symmetric
    assert intervals_overlap(at_hour(b[0]), at_hour(b[1]), at_hour(a[0]), at_hour(a[1])) is expected


def test_overlapping_candidate_on_same_resource(make_record):
    committed = make_record(10, 12)
    candidate = make_record(11, 13)

    assert overlaps(candidate, [committed]) is True


def test_touching_candidate_is_accepted(make_record):
    committed = make_record(10, 12)
    candidate = make_record(12, 13)

    assert overlaps(candidate, [committed]) is False


def test_other_resources_are_ignored(make_record):
    committed = make_record(10, 12, resource=uuid4())
    candidate = make_record(10, 12)

    assert overlaps(candidate, [committed]) is False


def test_candidate_is_not_compared_with_itself(make_record):
    """The stored copy of the record being moved must not block the move."""
    stored = make_record(10, 12)
    candidate = stored.shifted(timedelta(hours=1))

    assert overlaps(candidate, [stored]) is False


def test_no_others_never_overlaps(make_record):
    assert overlaps(make_record(10, 12), []) is False


def test_conflicting_records_returns_only_clashes(make_record):
    clash = make_record(9, 11)
    neighbour = make_record(12, 14)
    elsewhere = make_record(10, 12, resource=uuid4())
    candidate = make_record(10, 12)

    assert conflicting_records(candidate, [clash, neighbour, elsewhere]) == [clash]


def test_overlaps_is_deterministic(make_record):
    others = [make_record(9, 11), make_record(13, 14)]
    candidate = make_record(10, 12)

    assert overlaps(candidate, others) == overlaps(candidate, others)


def test_find_overlaps_reports_pairs(make_record):
    first = make_record(10, 12)
    second = make_record(11, 13)
    third = make_record(13, 14)

    pairs = find_overlaps([first, second, third])

    assert pairs == [(first, second)]


def test_find_overlaps_empty_when_invariant_holds(make_record):
    assert find_overlaps([make_record(8, 10), make_record(10, 12), make_record(12, 14)]) == []
