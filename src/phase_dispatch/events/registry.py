from __future__ import annotations

import inspect
import logging
from threading import RLock
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union

from .event import Event, EventTypePhase
from .phase import EventPhase, expand_phases

logger = logging.getLogger(__name__)

Handler = Callable[[Event], None]
Phases = Union[EventPhase, int]


def describe_handler(handler: Handler) -> str:
    return getattr(handler, "__qualname__", None) or getattr(handler, "__name__", None) or repr(handler)


def _same_handler(a: Handler, b: Handler) -> bool:
    # Identity, except that bound methods are recreated on every attribute access
    if a is b:
        return True
    return (
        inspect.ismethod(a)
        and inspect.ismethod(b)
        and a.__self__ is b.__self__
        and a.__func__ is b.__func__
    )


def _index_of(handlers: List[Handler], handler: Handler) -> int:
    for index, existing in enumerate(handlers):
        if _same_handler(existing, handler):
            return index
    return -1


class ListenerRegistry:
    """Ordered handler lists keyed by (event type, phase).

    Invariants:
        - a key present in the registry always maps to a non-empty list;
        - a handler appears at most once per key;
        - list order is subscription order, which is also invocation order.
    """

    def __init__(self) -> None:
        self._handlers: Dict[EventTypePhase, List[Handler]] = {}
        self._lock = RLock()

    def subscribe(self, event_type: str, handler: Handler, phases: Phases = EventPhase.TARGET) -> None:
        """Subscribe ``handler`` to ``event_type`` for every phase in ``phases``.

        Subscribing a handler that is already registered for a key is a no-op
        for that key.
        """
        if not callable(handler):
            raise TypeError("handler must be callable")
        with self._lock:
            for phase in expand_phases(phases):
                key = EventTypePhase(event_type, phase)
                handlers = self._handlers.setdefault(key, [])
                if _index_of(handlers, handler) < 0:
                    handlers.append(handler)
                    logger.debug("Subscribed %s to '%s' (%s)", describe_handler(handler), event_type, phase.name)

    def unsubscribe(self, event_type: str, handler: Handler, phases: Phases = EventPhase.TARGET) -> None:
        """Remove ``handler`` from every matching key. Silently ignores unknown handlers."""
        with self._lock:
            for phase in expand_phases(phases):
                key = EventTypePhase(event_type, phase)
                handlers = self._handlers.get(key)
                if handlers is None:
                    continue
                index = _index_of(handlers, handler)
                if index >= 0:
                    del handlers[index]
                    logger.debug("Unsubscribed %s from '%s' (%s)", describe_handler(handler), event_type, phase.name)
                if not handlers:
                    del self._handlers[key]

    def is_subscribed_to_any_phase(self, event_type: str, handler: Handler, phases: Phases) -> bool:
        with self._lock:
            for phase in expand_phases(phases):
                handlers = self._handlers.get(EventTypePhase(event_type, phase))
                if handlers and _index_of(handlers, handler) >= 0:
                    return True
        return False

    def remove_all(self, event_type: str, phases: Optional[Phases] = None) -> None:
        """Drop every handler for ``event_type``; all three phases when ``phases`` is None."""
        if phases is None:
            phases = EventPhase.ALL
        with self._lock:
            for phase in expand_phases(phases):
                handlers = self._handlers.pop(EventTypePhase(event_type, phase), None)
                if handlers is not None:
                    logger.debug("Removed %d handlers from '%s' (%s)", len(handlers), event_type, phase.name)
                    handlers.clear()

    def has_listener(self, event_type: str) -> bool:
        """True if anything listens to ``event_type`` in the target phase."""
        return EventTypePhase(event_type, EventPhase.TARGET) in self._handlers

    def snapshot(self, event_type: str, phase: EventPhase) -> Tuple[Handler, ...]:
        """Return the handlers for a key as a tuple frozen at call time."""
        with self._lock:
            return tuple(self._handlers.get(EventTypePhase(event_type, phase), ()))

    def handler_count(self, event_type: str, phase: EventPhase = EventPhase.TARGET) -> int:
        with self._lock:
            return len(self._handlers.get(EventTypePhase(event_type, phase), ()))

    def keys(self) -> List[EventTypePhase]:
        with self._lock:
            return list(self._handlers)

    def clear(self) -> None:
        with self._lock:
            for handlers in self._handlers.values():
                handlers.clear()
            self._handlers.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    def __iter__(self) -> Iterator[EventTypePhase]:
        return iter(self.keys())
