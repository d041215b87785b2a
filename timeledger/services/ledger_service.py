"""
Time Ledger - the single store of recorded time entries.

Architecture Decision: Write-through, memory second
Every view (timesheet grid, team breakdown, task summary) reads the same
in-memory ledger, so it must never hold an entry the backend rejected.
Mutations are awaited against the repository first and only applied to
memory once the write succeeded.
"""

import datetime
import logging
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from timeledger.domain.errors import LedgerWriteError, NotFoundError, ValidationError
from timeledger.domain.models import TimeEntry
from timeledger.infra.repository import TimeEntryRepository
from timeledger.utils import to_date

logger = logging.getLogger(__name__)

ProjectResolver = Callable[[str], Optional[str]]

# Fields the ledger owns; callers may never set them
_GENERATED_FIELDS = ("id", "created_at", "updated_at")


def build_entry(data: Dict[str, Any]) -> TimeEntry:
    """Validate raw fields into a TimeEntry, translating pydantic errors"""
    try:
        return TimeEntry.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e) from None


class TimeLedger:
    """
    Stores and validates TimeEntry records and answers filtered queries.

    Query results are always in insertion order.
    """

    def __init__(self, repository: Optional[TimeEntryRepository] = None,
                 resolve_project: Optional[ProjectResolver] = None,
                 clock: Callable[[], datetime.datetime] = datetime.datetime.now):
        """
        Args:
            repository: Optional persistent backend; None keeps the ledger in memory only
            resolve_project: task_id -> project_id lookup used for task-only entries
            clock: Source of "now" for created_at/updated_at
        """
        self.repository = repository
        self.resolve_project = resolve_project
        self.clock = clock
        self._entries: Dict[str, TimeEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entry_id: str) -> bool:
        return entry_id in self._entries

    async def load(self) -> int:
        """Replace the in-memory contents with what the repository holds"""
        if self.repository is None:
            return len(self._entries)
        try:
            entries = await self.repository.get_all()
        except Exception as e:
            raise LedgerWriteError(f"Could not load time entries: {e}") from e
        self._entries = {entry.id: entry for entry in entries}
        logger.info(f"Loaded {len(self._entries)} time entries")
        return len(self._entries)

    def _fill_project(self, data: Dict[str, Any]) -> None:
        if data.get("project_id") or not data.get("task_id"):
            return
        project_id = self.resolve_project(data["task_id"]) if self.resolve_project else None
        if not project_id:
            raise ValidationError(f"Cannot resolve project for task {data['task_id']!r}")
        data["project_id"] = project_id

    async def add_entry(self, **fields) -> TimeEntry:
        """
        Record a new entry.

        ``duration`` is taken as given, or computed from ``end_time - start_time``
        when omitted. ``date`` defaults to the day of ``start_time``.

        Raises:
            ValidationError: negative duration, missing user, missing task and
                project, or a task whose project cannot be resolved
            LedgerWriteError: the repository rejected the write
        """
        for name in _GENERATED_FIELDS:
            if name in fields:
                raise ValidationError(f"{name} is assigned by the ledger")

        data = dict(fields)
        if not data.get("user_id"):
            raise ValidationError("user_id is required")
        if not data.get("task_id") and not data.get("project_id"):
            raise ValidationError("Either task_id or project_id is required")

        if data.get("duration") is None:
            start, end = data.get("start_time"), data.get("end_time")
            if start is None or end is None:
                raise ValidationError("duration is required when start_time/end_time are not both given")
            try:
                data["duration"] = int((end - start).total_seconds())
            except TypeError:
                raise ValidationError("start_time and end_time must be datetimes") from None
        if isinstance(data["duration"], (int, float)) and data["duration"] < 0:
            raise ValidationError(f"duration must be >= 0, got {data['duration']}")

        if data.get("date") is None and data.get("start_time") is not None:
            data["date"] = to_date(data["start_time"])

        self._fill_project(data)

        now = self.clock()
        data["created_at"] = now
        data["updated_at"] = now
        entry = build_entry(data)

        if self.repository is not None:
            try:
                await self.repository.create(entry)
            except Exception as e:
                raise LedgerWriteError(f"Could not store time entry: {e}") from e

        self._entries[entry.id] = entry
        logger.info(f"Time entry {entry.id} added: task={entry.task_id} user={entry.user_id} "
                    f"duration={entry.duration}s manual={entry.is_manual}")
        return entry

    async def update_entry(self, entry_id: str, **fields) -> TimeEntry:
        """
        Merge ``fields`` into an existing entry and refresh ``updated_at``.

        Raises:
            NotFoundError: unknown ``entry_id``
            ValidationError: the merged entry is invalid, or ``id``/``created_at``
                would change
            LedgerWriteError: the repository rejected the write
        """
        existing = self.get(entry_id)

        if "id" in fields and fields["id"] != existing.id:
            raise ValidationError("id cannot be changed")
        if "created_at" in fields and fields["created_at"] != existing.created_at:
            raise ValidationError("created_at cannot be changed")

        data = existing.model_dump()
        data.update(fields)
        if fields.get("task_id") and "project_id" not in fields and fields["task_id"] != existing.task_id:
            # Project follows a new task; clearing the task keeps the project
            data["project_id"] = None
        self._fill_project(data)
        data["id"] = existing.id
        data["created_at"] = existing.created_at
        data["updated_at"] = self.clock()
        entry = build_entry(data)

        if self.repository is not None:
            try:
                stored = await self.repository.update(entry)
            except Exception as e:
                raise LedgerWriteError(f"Could not update time entry {entry_id}: {e}") from e
            if stored is None:
                raise LedgerWriteError(f"Time entry {entry_id} is missing from storage")

        self._entries[entry_id] = entry
        logger.info(f"Time entry {entry_id} updated: {sorted(fields)}")
        return entry

    async def delete_entry(self, entry_id: str) -> None:
        """
        Remove an entry.

        Raises:
            NotFoundError: unknown ``entry_id``
            LedgerWriteError: the repository rejected the delete
        """
        if entry_id not in self._entries:
            raise NotFoundError(entry_id)

        if self.repository is not None:
            try:
                await self.repository.delete(entry_id)
            except Exception as e:
                raise LedgerWriteError(f"Could not delete time entry {entry_id}: {e}") from e

        del self._entries[entry_id]
        logger.info(f"Time entry {entry_id} deleted")

    def get(self, entry_id: str) -> TimeEntry:
        """Get one entry; raises NotFoundError for unknown ids"""
        try:
            return self._entries[entry_id]
        except KeyError:
            raise NotFoundError(entry_id) from None

    def entries(self) -> List[TimeEntry]:
        """Snapshot of all entries in insertion order"""
        return list(self._entries.values())

    def query_by_window(self, start: datetime.date, end: datetime.date,
                        user_id: Optional[str] = None) -> List[TimeEntry]:
        """Entries attributed to a day in [start, end] (inclusive), optionally for one user"""
        start, end = to_date(start), to_date(end)
        return [
            entry for entry in self._entries.values()
            if start <= entry.date <= end and (not user_id or entry.user_id == user_id)
        ]

    def query_by_day(self, day: datetime.date, user_id: Optional[str] = None) -> List[TimeEntry]:
        """Entries attributed to exactly ``day``; a datetime's time of day is ignored"""
        day = to_date(day)
        return self.query_by_window(day, day, user_id)
