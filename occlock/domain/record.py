"""Versioned booking records guarded by optimistic concurrency control."""

from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator, model_validator
from typing_extensions import Self

PROTECTED_FIELDS = frozenset({"id", "version"})


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class VersionedRecord(BaseModel):
    """A booking of a resource over a half-open time window ``[start, end)``.

    The store owns the durable copy and its version counter. Every record
    handed to callers is a transient copy that goes stale as soon as another
    commit succeeds, so it must be re-fetched rather than trusted.

    Attributes:
        id: Stable unique identifier. Auto-generated if not provided.
        version: Commit counter. Starts at 0 and increases by exactly one on
            every successful commit.
        resource_id: The resource this record is booked against. A plain
            reference; the record does not own the resource.
        owner_id: The party that made the booking, if known.
        start: Inclusive start of the booked window.
        end: Exclusive end of the booked window.
        subject: Free-form description of the booking.

    Examples:
        >>> room = uuid4()
        >>> booking = VersionedRecord(
        ...     resource_id=room,
        ...     start=datetime(2025, 1, 1, 10, tzinfo=timezone.utc),
        ...     end=datetime(2025, 1, 1, 12, tzinfo=timezone.utc),
        ...     subject="Team meeting",
        ... )
        >>> booking.version
        0
    """

    model_config = {"extra": "forbid"}

    id: UUID = Field(default_factory=uuid4)
    version: int = Field(default=0, ge=0)
    resource_id: UUID
    owner_id: UUID | None = None
    start: datetime
    end: datetime
    subject: str = ""

    @field_validator("start", "end")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive values are read as UTC so windows always compare cleanly.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _check_window(self) -> Self:
        if self.end <= self.start:
            raise ValueError("end must be after start")
        return self

    def with_changes(self, **fields: Any) -> "VersionedRecord":
        """Return a validated copy with the given fields replaced.

        Args:
            **fields: Mutable record fields and their new values.

        Returns:
            A new record carrying the same id and version.

        Raises:
            ValueError: If ``id`` or ``version`` is among the fields, or a
                field name is not a record field.
            pydantic.ValidationError: If the resulting record is invalid.
        """
        if protected := PROTECTED_FIELDS.intersection(fields):
            raise ValueError(f"Cannot change protected fields: {sorted(protected)}")
        if unknown := set(fields).difference(type(self).model_fields):
            raise ValueError(f"Unknown record fields: {sorted(unknown)}")
        return type(self).model_validate({**self.model_dump(), **fields})

    def shifted(self, delta: timedelta) -> "VersionedRecord":
        """Return a copy with the whole window moved by ``delta``."""
        return self.with_changes(start=self.start + delta, end=self.end + delta)

    def changed_fields(self, other: "VersionedRecord") -> dict[str, Any]:
        """Return the mutable fields whose values in ``other`` differ from this record.

        Examples:
            >>> later = booking.shifted(timedelta(hours=1))
            >>> sorted(booking.changed_fields(later))
            ['end', 'start']
        """
        mine = self.model_dump(exclude=set(PROTECTED_FIELDS))
        theirs = other.model_dump(exclude=set(PROTECTED_FIELDS))
        return {name: value for name, value in theirs.items() if mine.get(name) != value}
