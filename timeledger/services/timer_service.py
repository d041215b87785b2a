"""
Timer Service - the running-timer state machine.

Architecture Decision: Observer Pattern (Qt Signals)
The service emits signals when state changes, keeping it decoupled from UI.
It never measures time itself: one ``tick()`` is one elapsed second, and the
tick source is armed and disarmed by the state transitions only.
"""

import datetime
import logging
from typing import Callable, Optional

from PySide6.QtCore import QObject, Signal

from timeledger.domain.errors import InvalidStateError, ValidationError
from timeledger.domain.models import TimeEntry, TimerSession, TimerState
from timeledger.infra.tick_sources import ManualTickSource, TickSource
from timeledger.services.ledger_service import TimeLedger
from timeledger.utils import format_clock

logger = logging.getLogger(__name__)


class TimerService(QObject):
    """
    Tracks at most one running timer and turns it into a ledger entry on stop.

    States: Idle and Running. The selected task survives a stop so the UI can
    restart the same task right away.
    """

    # Signals
    task_selected = Signal(object)  # task_id or None
    task_started = Signal(str)  # task_id
    task_stopped = Signal(str, int)  # task_id, recorded seconds
    elapsed_changed = Signal(str, int)  # (formatted_time, elapsed_seconds)
    stop_failed = Signal(str)  # error message; timer is still running

    def __init__(self, ledger: TimeLedger,
                 current_user_id: Callable[[], str],
                 tick_source: Optional[TickSource] = None,
                 clock: Callable[[], datetime.datetime] = datetime.datetime.now):
        super().__init__()
        self.ledger = ledger
        self.current_user_id = current_user_id
        self.clock = clock

        self.is_running: bool = False
        self.selected_task_id: Optional[str] = None
        self.start_time: Optional[datetime.datetime] = None
        self.elapsed_seconds: int = 0
        self._stopping = False  # derived-entry write in flight

        self.tick_source = tick_source if tick_source is not None else ManualTickSource()
        self.tick_source.ticked.connect(self.tick)

    @property
    def state(self) -> TimerState:
        return TimerState.RUNNING if self.is_running else TimerState.IDLE

    @property
    def session(self) -> TimerSession:
        """Validated snapshot of the current timer state"""
        return TimerSession(
            is_running=self.is_running,
            selected_task_id=self.selected_task_id,
            start_time=self.start_time,
            elapsed_seconds=self.elapsed_seconds
        )

    def select_task(self, task_id: Optional[str]):
        """
        Pre-select the task the next timer applies to.

        Raises:
            InvalidStateError: while a timer is running
        """
        if self.is_running:
            raise InvalidStateError("Cannot change the task while the timer is running")
        self.selected_task_id = task_id
        self.task_selected.emit(task_id)

    def start(self, task_id: Optional[str] = None):
        """
        Start the timer for ``task_id`` (or the pre-selected task).

        Raises:
            InvalidStateError: a timer is already running
            ValidationError: no task given and none selected
        """
        if self.is_running:
            raise InvalidStateError("Timer is already running")
        task_id = task_id or self.selected_task_id
        if not task_id:
            raise ValidationError("Cannot start the timer without a task")

        self.selected_task_id = task_id
        self.start_time = self.clock()
        self.elapsed_seconds = 0
        self.is_running = True
        self.tick_source.arm()

        logger.info(f"Timer started for task {task_id}")
        self.task_started.emit(task_id)

    def tick(self):
        """Count one elapsed second. No-op unless running."""
        if not self.is_running:
            return
        if self._stopping:
            logger.debug("Tick ignored while the stopped session is being recorded")
            return
        self.elapsed_seconds += 1
        self.elapsed_changed.emit(format_clock(self.elapsed_seconds), self.elapsed_seconds)

    async def stop(self) -> TimeEntry:
        """
        Stop the timer and record exactly one entry for the elapsed time.

        The engine only becomes idle once the ledger accepted the entry. If
        the write fails the timer keeps running with its elapsed time intact,
        ticks resume and the error is re-raised.

        Raises:
            InvalidStateError: no timer running (or a stop is already in flight);
                LedgerWriteError when storage failed
            ValidationError: the entry was rejected (e.g. task without project)

        Cancellation while the entry is being written is re-raised with the
        timer still running.
        """
        if not self.is_running or self._stopping:
            raise InvalidStateError("Timer is not running")

        user_id = self.current_user_id()
        self._stopping = True
        self.tick_source.disarm()
        task_id = self.selected_task_id
        duration = self.elapsed_seconds

        try:
            entry = await self.ledger.add_entry(
                task_id=task_id,
                user_id=user_id,
                date=self.start_time.date(),
                start_time=self.start_time,
                end_time=self.clock(),
                duration=duration,
                is_manual=False
            )
        except BaseException as e:
            # Any failure, cancellation included, leaves the timer running
            self._stopping = False
            self.tick_source.arm()
            reason = str(e) or type(e).__name__
            logger.warning(f"Stopping timer for task {task_id} failed, still running: {reason}")
            self.stop_failed.emit(reason)
            raise

        self._stopping = False
        self.is_running = False
        self.start_time = None
        self.elapsed_seconds = 0

        logger.info(f"Timer stopped for task {task_id}: {duration}s recorded as {entry.id}")
        self.task_stopped.emit(task_id, duration)
        return entry

    def discard(self) -> int:
        """
        Abandon the running timer without recording anything.

        Returns the discarded seconds. Raises InvalidStateError when idle.
        """
        if not self.is_running or self._stopping:
            raise InvalidStateError("Timer is not running")
        self.tick_source.disarm()
        discarded = self.elapsed_seconds
        self.is_running = False
        self.start_time = None
        self.elapsed_seconds = 0
        logger.warning(f"Timer for task {self.selected_task_id} discarded: {discarded}s dropped")
        return discarded
