from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .phase import EventPhase


@dataclass(frozen=True)
class EventTypePhase:
    """Registry key: an event type paired with a single phase."""

    event_type: str
    phase: EventPhase


@dataclass(eq=False)
class Event:
    """Mutable event record passed to every listener of a dispatch pass.

    Attributes:
        type: Event type string listeners subscribe to.
        bubbles: Whether the event takes part in bubbling.
        cancelable: Whether listeners may prevent the default action.
        phase: Phase this event is currently delivered in.
        target: Object that originally dispatched the event.
        current_target: Object whose listeners are currently running.
        canceled: Once set, no further listener is invoked.
        default_prevented: Set by listeners to veto the caller's default action.
    """

    type: str
    bubbles: bool = False
    cancelable: bool = False
    phase: EventPhase = EventPhase.TARGET
    target: Optional[Any] = None
    current_target: Optional[Any] = None
    canceled: bool = False
    default_prevented: bool = False

    def __post_init__(self) -> None:
        self.phase = EventPhase(self.phase)

    def cancel(self) -> None:
        """Stop delivery to the remaining listeners."""
        self.canceled = True

    def stop_propagation(self) -> None:
        self.cancel()

    def prevent_default(self) -> None:
        """Veto the default action. Ignored for non-cancelable events."""
        if self.cancelable:
            self.default_prevented = True

    def __repr__(self) -> str:
        return (
            f"Event(type={self.type!r}, phase={self.phase.name}, "
            f"canceled={self.canceled}, default_prevented={self.default_prevented})"
        )
