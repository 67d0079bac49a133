"""Exceptions for the occlock domain."""

import asyncio
from uuid import UUID


class InterruptedDuringWait(asyncio.CancelledError):
    """Raised when a retry backoff sleep is cancelled.

    The operation is treated as failed and the cancellation keeps travelling
    up to the caller. Subclassing ``CancelledError`` keeps asyncio's task
    cancellation semantics intact for whoever awaits the operation.
    """

    def __init__(self, record_id: UUID, attempt: int):
        super().__init__(f"Interrupted while backing off after attempt {attempt} on {record_id}")
        self.record_id = record_id
        self.attempt = attempt
