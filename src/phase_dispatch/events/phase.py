from __future__ import annotations

from enum import IntFlag
from typing import Tuple, Union


class EventPhase(IntFlag):
    """Propagation phases a listener can subscribe to.

    Values are bit flags so several phases can be requested at once,
    e.g. ``EventPhase.CAPTURE | EventPhase.TARGET``.
    """

    CAPTURE = 1
    TARGET = 2
    BUBBLING = 4

    ALL = CAPTURE | TARGET | BUBBLING


_ORDERED_PHASES: Tuple[EventPhase, ...] = (
    EventPhase.CAPTURE,
    EventPhase.TARGET,
    EventPhase.BUBBLING,
)


def expand_phases(phases: Union[EventPhase, int]) -> Tuple[EventPhase, ...]:
    """Break a composite phase mask up into the individual phases it contains.

    The result is always ordered capture, target, bubbling. Bits that do not
    belong to a known phase are ignored, and an empty mask yields ``()``.
    """
    mask = int(phases)
    return tuple(phase for phase in _ORDERED_PHASES if mask & phase)
