"""
phase_dispatch: phase-aware event dispatching for UI and game frameworks.

Listeners subscribe to an event type in one or more phases (capture, target,
bubbling). Events are delivered immediately or queued until the owner flushes
the queue, and listeners can cancel delivery or veto a default action.
"""
from .errors import ConfigurationError, DispatchError
from .events import (
    Event,
    EventDispatcher,
    EventPhase,
    EventQueue,
    EventTypePhase,
    ListenerRegistry,
    expand_phases,
    get_event_dispatcher,
    reset_event_dispatcher,
)
from .settings import DispatcherSettings

__all__ = [
    "ConfigurationError",
    "DispatchError",
    "DispatcherSettings",
    "Event",
    "EventDispatcher",
    "EventPhase",
    "EventQueue",
    "EventTypePhase",
    "ListenerRegistry",
    "expand_phases",
    "get_event_dispatcher",
    "reset_event_dispatcher",
]

__version__ = "0.1.0"
