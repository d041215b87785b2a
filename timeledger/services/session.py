"""
Tracking Session - one user's time-tracking context.

Architecture Decision: Explicit context instead of global state
A session owns exactly one ledger, one timer and one week cursor. It is
constructed per user session and passed to whoever needs it, so tests (and
multi-tenant hosts) can run any number of independent sessions side by side.

UI code calls the actions to mutate state and the ``get_*`` selectors to
read it; selectors always go through the aggregation functions.
"""

import datetime
import logging
from typing import Callable, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError

from timeledger.domain.errors import LedgerWriteError, ValidationError
from timeledger.domain.models import (
    DayTimesheet,
    ManualEntryForm,
    ProjectMembersAggregate,
    ProjectTimeAggregate,
    TaskTimeAggregate,
    TimeEntry,
    TimerSession,
    UserTaskAggregate,
    WeekTimesheet,
)
from timeledger.infra.config import Settings
from timeledger.infra.db import DatabaseEngine
from timeledger.infra.repository import TimeEntryRepository
from timeledger.infra.tick_sources import TickSource, create_tick_source
from timeledger.services import aggregation_service as agg
from timeledger.services.directory import NameDirectory
from timeledger.services.ledger_service import TimeLedger
from timeledger.services.timer_service import TimerService
from timeledger.services.week_cursor import MONDAY, WeekCursor

logger = logging.getLogger(__name__)

# Manual entries carry no clock time; they are booked from 09:00
MANUAL_ENTRY_START = datetime.time(9, 0)


class TrackingSession:
    """Actions and read selectors over one user's ledger, timer and week"""

    def __init__(self, current_user_id: Callable[[], str],
                 directory: Optional[NameDirectory] = None,
                 repository: Optional[TimeEntryRepository] = None,
                 tick_source: Optional[TickSource] = None,
                 week_start_day: int = MONDAY,
                 clock: Callable[[], datetime.datetime] = datetime.datetime.now):
        self.current_user_id = current_user_id
        self.directory = directory or NameDirectory()
        self.clock = clock
        self.engine: Optional[DatabaseEngine] = None

        self.ledger = TimeLedger(
            repository=repository,
            resolve_project=self.directory.resolve_project,
            clock=clock
        )
        self.timer = TimerService(
            self.ledger,
            current_user_id=current_user_id,
            tick_source=tick_source,
            clock=clock
        )
        self.week = WeekCursor(
            week_start_day=week_start_day,
            today=lambda: self.clock().date()
        )

    @classmethod
    async def open(cls, settings: Settings, directory: Optional[NameDirectory] = None,
                   user_id: Optional[str] = None,
                   tick_source: Optional[TickSource] = None) -> "TrackingSession":
        """
        Build a session backed by the configured database and load its entries.

        Args:
            settings: Application settings (database URL, preferences)
            directory: Name lookups; empty directory if omitted
            user_id: Current user; defaults to the configured default user
            tick_source: Overrides the tick backend named in the preferences
        """
        prefs = settings.preferences
        engine = DatabaseEngine(settings.get_db_url())
        current_user = user_id or prefs.default_user_id
        try:
            try:
                await engine.create_tables()
            except SQLAlchemyError as e:
                raise LedgerWriteError(f"Could not open database {engine.db_url}: {e}") from e

            session = cls(
                current_user_id=lambda: current_user,
                directory=directory,
                repository=TimeEntryRepository(engine.get_session()),
                tick_source=tick_source or create_tick_source(prefs.tick_backend, prefs.tick_interval_ms),
                week_start_day=prefs.week_start_day
            )
            session.engine = engine
            await session.ledger.load()
        except BaseException:
            await engine.dispose()
            raise
        logger.info(f"Session opened for {current_user} with {len(session.ledger)} entries")
        return session

    async def close(self):
        """Release the database engine opened by ``open()``"""
        if self.timer.is_running:
            logger.warning(f"Closing session with a running timer for task {self.timer.selected_task_id}")
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None

    # --- timer actions ---

    @property
    def timer_state(self) -> TimerSession:
        return self.timer.session

    def select_task(self, task_id: Optional[str]):
        self.timer.select_task(task_id)

    def start_timer(self, task_id: Optional[str] = None):
        self.timer.start(task_id)

    def tick(self):
        self.timer.tick()

    async def stop_timer(self) -> TimeEntry:
        return await self.timer.stop()

    # --- ledger actions ---

    async def add_entry(self, **fields) -> TimeEntry:
        """Record an entry; the current user is assumed when none is given"""
        fields.setdefault("user_id", self.current_user_id())
        return await self.ledger.add_entry(**fields)

    async def add_manual_entry(self, form: Union[ManualEntryForm, dict]) -> TimeEntry:
        """
        Record what the "add time" dialog collected for the current user.

        Raises:
            ValidationError: the form is incomplete or out of range
        """
        if not isinstance(form, ManualEntryForm):
            try:
                form = ManualEntryForm.model_validate(form)
            except PydanticValidationError as e:
                raise ValidationError.from_pydantic(e) from None

        start_time = datetime.datetime.combine(form.date, MANUAL_ENTRY_START)
        return await self.ledger.add_entry(
            task_id=form.task_id,
            project_id=form.project_id,
            user_id=self.current_user_id(),
            date=form.date,
            start_time=start_time,
            end_time=start_time + datetime.timedelta(seconds=form.duration),
            duration=form.duration,
            description=form.description or None,
            is_manual=True
        )

    async def update_entry(self, entry_id: str, **fields) -> TimeEntry:
        return await self.ledger.update_entry(entry_id, **fields)

    async def delete_entry(self, entry_id: str) -> None:
        await self.ledger.delete_entry(entry_id)

    # --- week navigation ---

    def set_week(self, day: datetime.date) -> datetime.date:
        return self.week.set_week(day)

    def next_week(self) -> datetime.date:
        return self.week.next_week()

    def previous_week(self) -> datetime.date:
        return self.week.previous_week()

    def jump_to_today(self) -> datetime.date:
        return self.week.jump_to_today()

    # --- selectors ---

    def get_week_entries(self, user_id: Optional[str] = None) -> List[TimeEntry]:
        return agg.week_entries(self.ledger, self.week, user_id)

    def get_day_entries(self, day: datetime.date, user_id: Optional[str] = None) -> List[TimeEntry]:
        return agg.day_entries(self.ledger, day, user_id)

    def get_total_time(self, entries: List[TimeEntry]) -> int:
        return agg.total_duration(entries)

    def get_week_timesheet(self, user_id: Optional[str] = None) -> WeekTimesheet:
        return agg.week_timesheet(self.ledger, self.week, user_id)

    def get_day_timesheet(self, day: datetime.date, user_id: Optional[str] = None) -> DayTimesheet:
        return agg.day_timesheet(self.ledger, day, user_id)

    def get_project_time_by_person(self, project_id: Optional[str] = None) -> List[ProjectTimeAggregate]:
        """Team view: this week's time per user×project, optionally for one project"""
        entries = agg.filter_by_project(self.get_week_entries(), project_id)
        return agg.group_by_user_and_project(
            entries,
            self.directory.resolve_project_name,
            self.directory.resolve_user_name
        )

    def get_project_members(self, project_id: Optional[str] = None) -> List[ProjectMembersAggregate]:
        return agg.group_by_project_members(self.get_project_time_by_person(project_id))

    def get_task_time_summary(self, user_id: Optional[str] = None) -> List[TaskTimeAggregate]:
        """This week's time per task, optionally for one user"""
        return agg.group_by_task(
            self.get_week_entries(user_id),
            self.directory.resolve_task_name,
            self.directory.resolve_project_name
        )

    def get_timesheet_rows(self, mine_only: bool = False) -> List[UserTaskAggregate]:
        """Timesheet grid: "my time" (current user only) or the whole team"""
        user_id = self.current_user_id() if mine_only else None
        return agg.group_by_user_and_task(
            self.get_week_entries(user_id),
            self.directory.resolve_user_name,
            self.directory.resolve_task_name,
            self.directory.resolve_project_name
        )
