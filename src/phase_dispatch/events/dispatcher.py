from __future__ import annotations

import logging
from typing import Any, List, Optional

from ..errors import ConfigurationError
from ..settings import DispatcherSettings
from .event import Event, EventTypePhase
from .phase import EventPhase
from .queue import EventQueue
from .registry import Handler, ListenerRegistry, Phases, describe_handler

log = logging.getLogger(__name__)

_UNSET: Any = object()


class EventDispatcher:
    """Base class for objects that dispatch events.

    Listeners subscribe per (event type, phase). Events are either delivered
    immediately on the caller's stack or queued until ``process_queue`` runs.

    Subclasses implementing hierarchical bubbling override ``process_event``
    (to walk ancestors) and ``has_bubbling_event_listener``.
    """

    def __init__(
        self,
        target: Any = _UNSET,
        *,
        settings: Optional[DispatcherSettings] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if target is None:
            raise ConfigurationError("Target cannot be None")
        self._target = self if target is _UNSET else target
        self._settings = settings or DispatcherSettings()
        self._log = logger or log
        self._registry = ListenerRegistry()
        self._queue = EventQueue()
        self._flushing = False

    @property
    def target(self) -> Any:
        """Object stamped as ``event.target`` on undecorated events."""
        return self._target

    @property
    def settings(self) -> DispatcherSettings:
        return self._settings

    @property
    def pending_events(self) -> int:
        return len(self._queue)

    def _trace(self, msg: str, *args: Any) -> None:
        if self._settings.debug:
            self._log.debug(msg, *args)

    # ------------------------ Subscribing ------------------------
    def add_event_listener(self, event_type: str, handler: Handler, phases: Phases = EventPhase.TARGET) -> None:
        """Subscribe ``handler``; defaults to the target phase only."""
        self._registry.subscribe(event_type, handler, phases)

    def remove_event_listener(self, event_type: str, handler: Handler, phases: Phases = EventPhase.TARGET) -> None:
        self._registry.unsubscribe(event_type, handler, phases)

    def mapped_to_any_phase(self, event_type: str, handler: Handler, phases: Phases) -> bool:
        """True if ``handler`` is subscribed to ``event_type`` in any of ``phases``."""
        return self._registry.is_subscribed_to_any_phase(event_type, handler, phases)

    def remove_all_listeners(self, event_type: str, phases: Optional[Phases] = None) -> None:
        """Remove every listener for ``event_type`` (all phases unless given)."""
        self._registry.remove_all(event_type, phases)

    def has_event_listener(self, event_type: str) -> bool:
        return self._registry.has_listener(event_type)

    def has_bubbling_event_listener(self, event_type: str) -> bool:
        """True if anyone in the bubbling hierarchy listens to ``event_type``.

        The base dispatcher has no hierarchy, so this only checks itself.
        """
        return self.has_event_listener(event_type)

    # ------------------------ Dispatching ------------------------
    def dispatch_event(self, event: Event, immediate: bool = True) -> None:
        """Dispatch ``event`` now, or queue it for ``process_queue`` when not immediate.

        Already canceled events are dropped without being stamped.
        """
        self._trace("Dispatching event [%r]", event)
        if event.canceled:
            return

        if event.target is None:
            event.target = self._target
        if event.current_target is None:
            event.current_target = event.target

        if immediate:
            self.process_event(event)
        else:
            self.enqueue_event(event)

    def process_event(self, event: Event) -> None:
        """Deliver a stamped event. Override to implement bubbling."""
        self.execute_listeners(event)

    def execute_listeners(self, event: Event) -> None:
        """Run the listeners subscribed to the event's type and phase.

        Iterates over the handler list as it stood when the pass started:
        handlers added during the pass wait for the next one, and handlers
        removed during the pass still receive this event. ``event.canceled``
        is checked before every handler.
        """
        if event.canceled:
            return

        handlers = self._registry.snapshot(event.type, event.phase)
        for handler in handlers:
            if event.canceled:
                self._trace("Event [%r] canceled; skipping remaining listeners", event)
                return
            if self._settings.isolate_listener_errors:
                try:
                    handler(event)
                except Exception:
                    self._log.exception(
                        "Error in listener %s for '%s'", describe_handler(handler), event.type
                    )
            else:
                handler(event)

    # ------------------------ Queued processing ------------------------
    def enqueue_event(self, event: Event) -> None:
        """Queue an event for the next ``process_queue`` call."""
        self._trace("Enqueueing event [%r]. Queue count: %d", event, len(self._queue))
        self._queue.append(event)

    def process_queue(self) -> int:
        """Deliver queued events in FIFO order and return how many were processed.

        Only the events queued before the call are delivered; anything queued
        by their listeners stays for the next call. A nested call made from a
        listener during a flush does nothing.
        """
        if self._flushing:
            self._trace("process_queue called during a flush; ignoring")
            return 0
        count = len(self._queue)
        if count == 0:
            self._trace("No enqueued events to process")
            return 0

        events = self._queue.peek(count)
        generation = self._queue.generation
        processed = 0
        self._flushing = True
        try:
            for event in events:
                if self._queue.generation != generation:
                    # Cleared by dispose(); whatever is queued now was never captured
                    self._trace("Queue cleared during flush; stopping after %d events", processed)
                    return processed
                try:
                    self.execute_listeners(event)
                except Exception:
                    # Keep the failing event and everything after it queued
                    if self._queue.generation == generation:
                        self._queue.drain(processed)
                    raise
                processed += 1
            if self._queue.generation == generation:
                self._queue.drain(count)
        finally:
            self._flushing = False
        self._trace("Processed %d enqueued events", processed)
        return processed

    # ------------------------ Preventing default ------------------------
    def is_default_prevented(self, event_type: str, bubbles: bool = False) -> bool:
        """Ask listeners whether the default action for ``event_type`` should be skipped.

        Returns False when nobody listens in the target phase. Otherwise a
        cancelable event is dispatched immediately and its
        ``default_prevented`` flag is returned.
        """
        if not self.has_event_listener(event_type):
            return False
        event = Event(event_type, bubbles=bubbles, cancelable=True)
        self.dispatch_event(event)
        return event.default_prevented

    # ------------------------ Lifecycle ------------------------
    def registered_keys(self) -> List[EventTypePhase]:
        return self._registry.keys()

    def dispose(self) -> None:
        """Release every listener and pending event. Safe to call repeatedly."""
        for key in self._registry.keys():
            self._registry.remove_all(key.event_type, key.phase)
        self._registry.clear()
        self._queue.clear()

    def __enter__(self) -> "EventDispatcher":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()


# Process-wide dispatcher for convenience
_GLOBAL_DISPATCHER: Optional[EventDispatcher] = None


def get_event_dispatcher() -> EventDispatcher:
    """Return the process-global EventDispatcher, creating one if necessary."""
    global _GLOBAL_DISPATCHER
    if _GLOBAL_DISPATCHER is None:
        _GLOBAL_DISPATCHER = EventDispatcher(settings=DispatcherSettings.from_sources())
    return _GLOBAL_DISPATCHER


def reset_event_dispatcher() -> None:
    """Dispose and drop the global dispatcher (useful in tests)."""
    global _GLOBAL_DISPATCHER
    if _GLOBAL_DISPATCHER is not None:
        _GLOBAL_DISPATCHER.dispose()
    _GLOBAL_DISPATCHER = None
