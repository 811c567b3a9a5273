import heapq
from dataclasses import dataclass, field
from typing import Callable, List, Optional


@dataclass(order=True)
class ScheduledAction:
    at_ms: int
    order: int
    name: str = field(compare=False)
    action: Callable[[], None] = field(compare=False)
    interval_ms: Optional[int] = field(default=None, compare=False)
    cancelled: bool = field(default=False, compare=False)


class TurnScheduler:
    """Simulation-time timers.

    Time only moves through advance(); callbacks run on the caller's thread
    in (due time, insertion order). Repeating timers re-arm themselves after
    running unless they were cancelled from inside the callback.
    """

    def __init__(self) -> None:
        self.queue: List[ScheduledAction] = []
        self._order = 0
        self._running: Optional[ScheduledAction] = None
        self.current_ms = 0

    def schedule(self, delay_ms: int, name: str, action: Callable[[], None]) -> ScheduledAction:
        return self._push(self.current_ms + delay_ms, name, action, None)

    def schedule_every(self, interval_ms: int, name: str, action: Callable[[], None]) -> ScheduledAction:
        if interval_ms <= 0:
            raise ValueError("interval must be positive")
        return self._push(self.current_ms + interval_ms, name, action, interval_ms)

    def _push(self, at_ms: int, name: str, action: Callable[[], None], interval_ms: Optional[int]) -> ScheduledAction:
        self._order += 1
        item = ScheduledAction(at_ms, self._order, name, action, interval_ms)
        heapq.heappush(self.queue, item)
        return item

    def cancel(self, item: Optional[ScheduledAction]) -> None:
        if item is not None:
            item.cancelled = True

    def clear(self) -> None:
        # the running timer is off the heap but must not re-arm either
        if self._running is not None:
            self._running.cancelled = True
        for item in self.queue:
            item.cancelled = True
        self.queue.clear()

    def pending(self) -> List[str]:
        return [item.name for item in sorted(self.queue) if not item.cancelled]

    def advance(self, delta_ms: int) -> None:
        target = self.current_ms + max(0, delta_ms)
        while self.queue and self.queue[0].at_ms <= target:
            item = heapq.heappop(self.queue)
            if item.cancelled:
                continue
            self.current_ms = item.at_ms
            self._running = item
            try:
                item.action()
            finally:
                self._running = None
            if item.interval_ms is not None and not item.cancelled:
                # keep the same handle so callers can still cancel it
                self._order += 1
                item.at_ms += item.interval_ms
                item.order = self._order
                heapq.heappush(self.queue, item)
        self.current_ms = target
