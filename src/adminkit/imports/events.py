"""Import lifecycle events and their listeners."""

import inspect
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

import structlog

from adminkit.models.import_ import Import

logger = structlog.get_logger(__name__)

Listener = Callable[[Any], Awaitable[None] | None]

_listeners: dict[type, list[Listener]] = defaultdict(list)


@dataclass
class ImportChunkProcessed:
    """Emitted after a chunk's rows and counters were committed."""

    import_: Import
    column_map: dict[str, str]
    options: dict[str, Any] = field(default_factory=dict)
    processed_rows: int = 0
    successful_rows: int = 0


@dataclass
class ImportCompleted:
    """Emitted once, after every chunk of an import has run."""

    import_: Import
    notification_body: str


def listen(event_type: type) -> Callable[[Listener], Listener]:
    """Register the decorated function as a listener for ``event_type``."""

    def decorator(listener: Listener) -> Listener:
        _listeners[event_type].append(listener)
        return listener

    return decorator


def forget(event_type: type, listener: Listener) -> None:
    if listener in _listeners[event_type]:
        _listeners[event_type].remove(listener)


async def dispatch(event: Any) -> None:
    """Call every listener of the event's type, sync or async.

    A failing listener is logged; it does not stop the others or undo the
    work that produced the event.
    """
    for listener in list(_listeners[type(event)]):
        try:
            result = listener(event)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception(
                "Import event listener failed",
                event_type=type(event).__name__,
                listener=getattr(listener, "__qualname__", repr(listener)),
            )
