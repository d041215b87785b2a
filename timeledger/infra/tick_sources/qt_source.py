"""
Qt tick source backed by QTimer.

Requires a running Qt event loop (QApplication/QCoreApplication.exec()).
"""

from PySide6.QtCore import QTimer

from .base import TickSource


class QtTickSource(TickSource):
    """Fires ``ticked`` from a repeating QTimer"""

    def __init__(self, interval_ms: int = 1000):
        super().__init__(interval_ms)
        self.timer = QTimer()
        self.timer.setInterval(interval_ms)
        self.timer.timeout.connect(self.ticked.emit)

    def arm(self):
        self.timer.start()

    def disarm(self):
        self.timer.stop()

    @property
    def is_armed(self) -> bool:
        return self.timer.isActive()
