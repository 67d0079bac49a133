import contextvars
from dataclasses import dataclass, replace
from typing import Any
from uuid import UUID, uuid4


@dataclass(frozen=True)
class ExecutionContext:
    """Immutable context describing who is doing the current operation.

    Each concurrent actor runs under its own context so that log lines from
    the store and the coordinators can be traced back to one logical
    operation, even when many actors race on the same record.

    Attributes:
        correlation_id: Unique ID that traces one logical operation across
            all attempts, escalations and store calls it makes.
        actor: Optional human-readable name of the acting party.

    Examples:
        Create a new context at the start of an operation:

        >>> ctx = ExecutionContext.create(actor="front-desk")
        >>> set_context(ctx)

        Rename the actor while keeping the correlation:

        >>> ctx = ctx.for_actor("night-shift")
    """

    correlation_id: UUID | None = None
    actor: str | None = None

    @classmethod
    def create(
        cls, actor: str | None = None, correlation_id: UUID | None = None
    ) -> "ExecutionContext":
        """Create a new context, typically where an actor starts its work.

        Args:
            actor: Optional name of the acting party.
            correlation_id: Optional correlation ID. If not provided, a new
                UUID is generated.

        Returns:
            A new ExecutionContext instance.
        """
        if correlation_id is None:
            correlation_id = uuid4()
        return cls(correlation_id=correlation_id, actor=actor)

    def for_actor(self, actor: str) -> "ExecutionContext":
        return replace(self, actor=actor)


_context: contextvars.ContextVar[ExecutionContext | None] = contextvars.ContextVar(
    "execution_context", default=None
)


def get_context() -> ExecutionContext:
    """Get the current execution context.

    If no context has been set, returns an empty ExecutionContext with all fields None.
    """
    ctx = _context.get()
    if ctx is None:
        return ExecutionContext()
    return ctx


def set_context(context: ExecutionContext) -> None:
    _context.set(context)


def clear_context() -> None:
    """Clear the current execution context.

    This is useful for cleanup or testing.
    """
    _context.set(None)


def get_or_create_context(actor: str | None = None) -> ExecutionContext:
    """Get the current context, or create and set a new one if not set.

    Args:
        actor: Actor name used only when a new context has to be created.

    Returns:
        The current or newly created ExecutionContext.
    """
    ctx = _context.get()
    if ctx is None:
        ctx = ExecutionContext.create(actor=actor)
        set_context(ctx)
    return ctx


def log_extra(**fields: Any) -> dict[str, Any]:
    """Build a logging ``extra`` dict with the current correlation attached.

    Values are stringified. Record contents should not be passed here, only
    identifiers and counters.

    Examples:
        >>> LOGGER.info("Committed", extra=log_extra(record_id=record.id, version=2))
    """
    extra = {name: str(value) for name, value in fields.items()}
    ctx = get_context()
    if ctx.correlation_id is not None:
        extra["correlation_id"] = str(ctx.correlation_id)
    if ctx.actor is not None:
        extra["actor"] = ctx.actor
    return extra
