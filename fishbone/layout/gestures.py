from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from fishbone.causes.graph import EndpointRef

from .simulator import LayoutSimulator

logger = logging.getLogger(__name__)


def clamp(value: float, low: float, high: float) -> float:
    if value < low:
        return low
    if value > high:
        return high
    return value


class ResizeDebouncer:
    """Coalesce bursts of triggers into one firing after a quiet period.

    The host calls :meth:`poll` once per frame; it returns ``True`` exactly
    once, the first time it runs ``delay`` seconds after the latest trigger.
    """

    def __init__(self, delay: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.delay = delay
        self.clock = clock
        self.pending = 0
        self._deadline: Optional[float] = None

    def trigger(self) -> None:
        self.pending += 1
        self._deadline = self.clock() + self.delay

    def poll(self) -> bool:
        if self._deadline is None or self.clock() < self._deadline:
            return False
        logger.debug("Coalesced %d resize events", self.pending)
        self._deadline = None
        self.pending = 0
        return True


class GestureController:
    """Translate pointer and resize signals into simulation commands."""

    def __init__(
        self,
        simulator: LayoutSimulator,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.simulator = simulator
        self.graph = simulator.graph
        self.context = simulator.context
        self.debouncer = ResizeDebouncer(simulator.settings.resize_debounce, clock)

    def drag_start(self, ref: EndpointRef, x: float, y: float) -> None:
        self.context.dragging = True
        self.graph.pin(ref, *self._clamped(x, y))
        self.simulator.restart(1.0)

    def drag_move(self, ref: EndpointRef, x: float, y: float) -> None:
        self.graph.pin(ref, *self._clamped(x, y))
        self.simulator.restart(1.0)

    def drag_end(self, ref: EndpointRef) -> None:
        self.graph.unpin(ref)
        self.context.dragging = False

    def click(self, ref: EndpointRef) -> bool:
        """Release a pinned body; return whether anything changed."""

        if not self.graph.is_pinned(ref):
            return False
        self.graph.unpin(ref)
        self.simulator.restart(1.0)
        return True

    def resize(self, width: float, height: float) -> None:
        self.context.viewport = (float(width), float(height))
        self.debouncer.trigger()

    def poll(self) -> bool:
        """Run once per frame; restart the layout when a resize burst has settled."""

        if self.debouncer.poll():
            self.simulator.restart()
            return True
        return False

    def _clamped(self, x: float, y: float) -> tuple[float, float]:
        width, height = self.context.viewport
        return clamp(x, 0.0, width), clamp(y, 0.0, height)
