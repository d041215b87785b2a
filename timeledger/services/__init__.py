"""Services layer - Business logic"""

from .ledger_service import TimeLedger
from .timer_service import TimerService
from .week_cursor import WeekCursor
from .directory import NameDirectory
from .session import TrackingSession
from .report_service import TimesheetReportService

__all__ = [
    "TimeLedger", "TimerService", "WeekCursor", "NameDirectory",
    "TrackingSession", "TimesheetReportService",
]
