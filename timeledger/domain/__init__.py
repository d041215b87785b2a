"""Domain layer - Pure business entities and errors"""

from .errors import (
    InvalidStateError,
    LedgerWriteError,
    NotFoundError,
    TimeTrackingError,
    ValidationError,
)
from .models import (
    DayTimesheet,
    ManualEntryForm,
    ProjectMembersAggregate,
    ProjectTimeAggregate,
    TaskTimeAggregate,
    TimeEntry,
    TimerSession,
    TimerState,
    TrackerPreferences,
    UserTaskAggregate,
    WeekTimesheet,
)

__all__ = [
    "TimeEntry", "TimerSession", "TimerState", "ManualEntryForm",
    "ProjectTimeAggregate", "TaskTimeAggregate", "UserTaskAggregate",
    "ProjectMembersAggregate", "DayTimesheet", "WeekTimesheet", "TrackerPreferences",
    "TimeTrackingError", "ValidationError", "NotFoundError", "InvalidStateError",
    "LedgerWriteError",
]
