"""
Tick source driven by hand.

Used by tests and by headless callers that already own a clock loop.
"""

from .base import TickSource


class ManualTickSource(TickSource):
    """Emits ``ticked`` only when ``fire()`` is called while armed"""

    def __init__(self, interval_ms: int = 1000):
        super().__init__(interval_ms)
        self._armed = False
        self.arm_count = 0

    def arm(self):
        self._armed = True
        self.arm_count += 1

    def disarm(self):
        self._armed = False

    @property
    def is_armed(self) -> bool:
        return self._armed

    def fire(self, times: int = 1) -> int:
        """Deliver up to ``times`` ticks. Returns how many were delivered."""
        delivered = 0
        for _ in range(times):
            if not self._armed:
                break
            self.ticked.emit()
            delivered += 1
        return delivered
