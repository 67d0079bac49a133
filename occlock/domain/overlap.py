"""Overlap checks for bookings that share a resource.

All functions here are pure. Windows are half-open, so two bookings that
merely touch (one ends exactly when the other starts) do not overlap.
"""

from collections.abc import Iterable
from datetime import datetime
from itertools import combinations

from .record import VersionedRecord


def intervals_overlap(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    return a_start < b_end and b_start < a_end


def conflicting_records(
    candidate: VersionedRecord, others: Iterable[VersionedRecord]
) -> list[VersionedRecord]:
    """Return the records in ``others`` that clash with ``candidate``.

    A record clashes when it is a different record on the same resource
    whose window intersects the candidate's window.

    Args:
        candidate: The record whose window is being checked.
        others: Committed records to compare against. The candidate's own
            stored copy may be included; it is skipped by id.

    Returns:
        The clashing records, in the order they were given.
    """
    return [
        other
        for other in others
        if other.id != candidate.id
        and other.resource_id == candidate.resource_id
        and intervals_overlap(other.start, other.end, candidate.start, candidate.end)
    ]


def overlaps(candidate: VersionedRecord, others: Iterable[VersionedRecord]) -> bool:
    """Check whether ``candidate`` overlaps any other record on its resource.

    Examples:
        >>> overlaps(candidate, store_records)
        False
    """
    return bool(conflicting_records(candidate, others))


def find_overlaps(
    records: Iterable[VersionedRecord],
) -> list[tuple[VersionedRecord, VersionedRecord]]:
    """Return every pair of records that violates the no-overlap rule."""
    return [
        (first, second)
        for first, second in combinations(list(records), 2)
        if conflicting_records(first, [second])
    ]
