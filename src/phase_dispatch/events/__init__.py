from .dispatcher import EventDispatcher, get_event_dispatcher, reset_event_dispatcher
from .event import Event, EventTypePhase
from .phase import EventPhase, expand_phases
from .queue import EventQueue
from .registry import Handler, ListenerRegistry

__all__ = [
    "Event",
    "EventDispatcher",
    "EventPhase",
    "EventQueue",
    "EventTypePhase",
    "Handler",
    "ListenerRegistry",
    "expand_phases",
    "get_event_dispatcher",
    "reset_event_dispatcher",
]
