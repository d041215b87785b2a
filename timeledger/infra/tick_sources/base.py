"""
Base class for periodic tick sources.

Architecture Decision: Observer Pattern + Factory Pattern
The timer only reacts to ``ticked`` signals; it never measures time itself.
Each backend decides how a second is scheduled (Qt event loop, asyncio,
or by hand in tests).
"""

from abc import ABCMeta, abstractmethod
from PySide6.QtCore import QObject, Signal


class QABCMeta(type(QObject), ABCMeta):
    """Combined metaclass for QObject and ABC"""
    pass


class TickSource(QObject, metaclass=QABCMeta):
    """
    Abstract base class for tick delivery.

    Contract: while armed, emit ``ticked`` once per interval; after
    ``disarm()`` returns, emit nothing until armed again.
    """

    ticked = Signal()

    def __init__(self, interval_ms: int = 1000):
        super().__init__()
        self.interval_ms = interval_ms

    @abstractmethod
    def arm(self):
        """Start delivering ticks"""

    @abstractmethod
    def disarm(self):
        """Stop delivering ticks"""

    @property
    @abstractmethod
    def is_armed(self) -> bool:
        """Whether ticks are currently being delivered"""
