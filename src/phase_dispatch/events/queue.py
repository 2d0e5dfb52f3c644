from __future__ import annotations

from threading import RLock
from typing import Iterator, List, Tuple

from .event import Event


class EventQueue:
    """FIFO buffer of events awaiting a later flush.

    Events appended while a flush is running land behind the slice that
    flush captured, so they are kept for the next one.
    """

    def __init__(self) -> None:
        self._events: List[Event] = []
        self._lock = RLock()
        self._generation = 0

    def append(self, event: Event) -> None:
        with self._lock:
            self._events.append(event)

    def peek(self, count: int) -> Tuple[Event, ...]:
        """Return the first ``count`` events without removing them."""
        with self._lock:
            return tuple(self._events[:count])

    def drain(self, count: int) -> None:
        """Remove the first ``count`` events."""
        with self._lock:
            del self._events[:count]

    def clear(self) -> None:
        """Drop every event. Slices captured before the clear become stale."""
        with self._lock:
            self._events.clear()
            self._generation += 1

    @property
    def generation(self) -> int:
        """Incremented by every ``clear``; lets a flush detect that its slice is gone."""
        return self._generation

    def __len__(self) -> int:
        return len(self._events)

    def __bool__(self) -> bool:
        return bool(self._events)

    def __iter__(self) -> Iterator[Event]:
        with self._lock:
            return iter(tuple(self._events))
