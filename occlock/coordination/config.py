"""Retry configuration using pydantic-settings."""

from pydantic import Field
from pydantic_settings import BaseSettings


class RetrySettings(BaseSettings):
    """Bounds and pacing for automatic retries after version conflicts.

    All settings can be configured via environment variables with the
    OCCLOCK_RETRY_ prefix. For example:
    - OCCLOCK_RETRY_MAX_RETRIES=5
    - OCCLOCK_RETRY_BASE_BACKOFF_MS=50
    - OCCLOCK_RETRY_JITTER_MAX_MS=25

    Attributes:
        max_retries: The maximum number of attempts (initial + retries).
            For example, max_retries=3 means 1 initial attempt + up to 2
            retries.
        base_backoff_ms: Delay before the first retry, in milliseconds.
            Each further retry doubles it.
        jitter_max_ms: Upper bound (exclusive) of the random delay added to
            every backoff, in milliseconds.

    Example:
        >>> settings = RetrySettings()
        >>> settings.max_retries
        3
        >>> fast = RetrySettings(max_retries=5, base_backoff_ms=0, jitter_max_ms=0)
    """

    max_retries: int = Field(default=3, gt=0)
    base_backoff_ms: int = Field(default=100, ge=0)
    jitter_max_ms: int = Field(default=100, ge=0)

    model_config = {"env_prefix": "OCCLOCK_RETRY_"}
