"""Record lifecycle events and their synchronous dispatcher."""

from collections.abc import Callable
from enum import Enum

import structlog

from searchable.store.records import Record

logger = structlog.get_logger()

Handler = Callable[[Record], None]


class RecordEvent(str, Enum):
    """Lifecycle events fired by the store after a write commits."""

    AFTER_CREATE = "after_create"
    AFTER_UPDATE = "after_update"
    AFTER_DESTROY = "after_destroy"


class LifecycleHooks:
    """Per-model registry of lifecycle handlers.

    Handlers run inline, in subscription order, on the thread performing
    the store operation. Exceptions are not caught: a failing handler fails
    the operation that fired it.
    """

    def __init__(self) -> None:
        """Initialize an empty hook registry."""
        self._handlers: dict[tuple[type[Record], RecordEvent], list[Handler]] = {}

    def subscribe(
        self, model: type[Record], event: RecordEvent, handler: Handler
    ) -> None:
        """Register a handler for one model and event.

        Args:
            model: Record class to observe.
            event: Lifecycle event to react to.
            handler: Callable receiving the affected record.
        """
        self._handlers.setdefault((model, event), []).append(handler)
        logger.debug(
            "lifecycle_handler_subscribed",
            model=model.__name__,
            lifecycle_event=event.value,
        )

    def handler_count(self, model: type[Record], event: RecordEvent) -> int:
        """Number of handlers registered for a model and event."""
        return len(self._handlers.get((model, event), []))

    def fire(self, event: RecordEvent, record: Record) -> None:
        """Dispatch an event to every handler of the record's class.

        Args:
            event: Lifecycle event that occurred.
            record: Record the event concerns.
        """
        for handler in list(self._handlers.get((type(record), event), [])):
            handler(record)
