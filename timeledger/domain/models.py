"""
Domain Models using Pydantic for validation.

Architecture Decision: Why Pydantic?
Entries arrive from timer stops, manual entry forms, the database and YAML
config. Pydantic validates every one of those paths the same way and gives
us cheap copies for the immutable-identity update semantics of the ledger.
"""

import datetime
import uuid
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def new_entry_id() -> str:
    """Generate an opaque, never-reused entry id"""
    return uuid.uuid4().hex


class TimeEntry(BaseModel):
    """
    A single block of tracked work.

    ``date`` is the attribution day and may differ from the day of
    ``start_time`` (manual entries may backdate). ``duration`` is
    authoritative and need not equal ``end_time - start_time``.
    """
    model_config = ConfigDict(from_attributes=True, extra="forbid")

    id: str = Field(default_factory=new_entry_id, min_length=1)
    task_id: Optional[str] = None
    user_id: str = Field(..., min_length=1)
    project_id: Optional[str] = None

    date: datetime.date
    start_time: datetime.datetime
    end_time: Optional[datetime.datetime] = None
    duration: int = Field(default=0, ge=0)  # seconds

    description: Optional[str] = None
    is_manual: bool = False

    created_at: datetime.datetime = Field(default_factory=datetime.datetime.now)
    updated_at: datetime.datetime = Field(default_factory=datetime.datetime.now)

    @field_validator("date", mode="before")
    @classmethod
    def _strip_time_of_day(cls, value):
        if isinstance(value, datetime.datetime):
            return value.date()
        return value

    @model_validator(mode="after")
    def _require_task_or_project(self) -> "TimeEntry":
        if not self.task_id and not self.project_id:
            raise ValueError("Either task_id or project_id is required")
        return self


class TimerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


class TimerSession(BaseModel):
    """
    Snapshot of the running-timer state machine.

    Running implies a start time and a selected task; idle implies no
    start time.
    """
    is_running: bool = False
    selected_task_id: Optional[str] = None
    start_time: Optional[datetime.datetime] = None
    elapsed_seconds: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _check_state(self) -> "TimerSession":
        if self.is_running and (self.start_time is None or not self.selected_task_id):
            raise ValueError("A running timer needs a start time and a task")
        if not self.is_running and self.start_time is not None:
            raise ValueError("An idle timer cannot have a start time")
        return self

    @property
    def state(self) -> TimerState:
        return TimerState.RUNNING if self.is_running else TimerState.IDLE


class ManualEntryForm(BaseModel):
    """
    Input of the "add time" dialog.

    Either a task or a project must be chosen; the project is filled in from
    the task when only the task is given.
    """
    task_id: Optional[str] = None
    project_id: Optional[str] = None
    date: datetime.date
    hours: int = Field(default=0, ge=0, le=24)
    minutes: int = Field(default=0, ge=0, le=59)
    description: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def _strip_time_of_day(cls, value):
        if isinstance(value, datetime.datetime):
            return value.date()
        return value

    @model_validator(mode="after")
    def _check_form(self) -> "ManualEntryForm":
        if not self.task_id and not self.project_id:
            raise ValueError("Please select a task or project")
        if self.hours == 0 and self.minutes == 0:
            raise ValueError("Please enter time (hours and/or minutes)")
        return self

    @property
    def duration(self) -> int:
        return self.hours * 3600 + self.minutes * 60


class ProjectTimeAggregate(BaseModel):
    """Time one user spent on one project"""
    project_id: Optional[str]
    project_name: str
    user_id: str
    user_name: str
    total_duration: int = 0
    entries: List[TimeEntry] = Field(default_factory=list)


class TaskTimeAggregate(BaseModel):
    """Time spent on one task, with the project it belongs to"""
    task_id: Optional[str]
    task_name: str
    project_id: Optional[str]
    project_name: str
    total_duration: int = 0
    entries: List[TimeEntry] = Field(default_factory=list)


class UserTaskAggregate(BaseModel):
    """One user's row group in the timesheet grid: the user's tasks"""
    user_id: str
    user_name: str
    total_duration: int = 0
    tasks: List[TaskTimeAggregate] = Field(default_factory=list)


class ProjectMembersAggregate(BaseModel):
    """Team view: a project with the people who logged time on it"""
    project_id: Optional[str]
    project_name: str
    total_duration: int = 0
    members: List[ProjectTimeAggregate] = Field(default_factory=list)


class DayTimesheet(BaseModel):
    date: datetime.date
    entries: List[TimeEntry] = Field(default_factory=list)
    total_duration: int = 0


class WeekTimesheet(BaseModel):
    week_start: datetime.date
    week_end: datetime.date
    entries: List[TimeEntry] = Field(default_factory=list)
    total_duration: int = 0
    days: List[DayTimesheet] = Field(default_factory=list)


class TrackerPreferences(BaseModel):
    """
    User configuration and preferences.

    Loaded from YAML by the settings layer.
    """
    model_config = ConfigDict(from_attributes=True)

    default_user_id: str = Field(default="user-1", min_length=1, description="User id recorded on entries")
    week_start_day: int = Field(default=0, ge=0, le=6, description="First day of the week (0=Monday)")

    # Timer settings
    tick_interval_ms: int = Field(default=1000, gt=0, description="Tick period of the running timer")
    tick_backend: str = Field(default="qt", pattern="^(qt|asyncio|manual)$", description="'qt', 'asyncio' or 'manual'")

    # Report settings
    report_template: str = "weekly_report.txt"
    reports_directory: Optional[str] = None
