"""
Aggregation Service - read-side views over the time ledger.

Architecture Decision: Pure functions with injected name resolvers
The personal timesheet, the team breakdown and the task summary all slice
the same ledger. Grouping lives here once, takes display-name lookups as
arguments, and never caches: every call recomputes from the entries it is
given, so all views stay numerically consistent after any mutation.

Bucket order is the order in which a bucket's first entry appears in the
input, which makes results deterministic for identical input.
"""

import datetime
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from timeledger.domain.models import (
    DayTimesheet,
    ProjectMembersAggregate,
    ProjectTimeAggregate,
    TaskTimeAggregate,
    TimeEntry,
    UserTaskAggregate,
    WeekTimesheet,
)
from timeledger.services.ledger_service import TimeLedger
from timeledger.services.week_cursor import WeekCursor
from timeledger.utils import to_date

NameResolver = Callable[[str], str]

NO_TASK = "No task"
NO_PROJECT = "No project"


def _resolve(resolver: NameResolver, key: Optional[str], fallback: str) -> str:
    return resolver(key) if key else fallback


def week_entries(ledger: TimeLedger, cursor: WeekCursor,
                 user_id: Optional[str] = None) -> List[TimeEntry]:
    """Entries attributed to the cursor's week"""
    start, end = cursor.current_week_range()
    return ledger.query_by_window(start, end, user_id)


def day_entries(ledger: TimeLedger, day: datetime.date,
                user_id: Optional[str] = None) -> List[TimeEntry]:
    """Entries attributed to ``day``"""
    return ledger.query_by_day(day, user_id)


def total_duration(entries: Iterable[TimeEntry]) -> int:
    """Sum of durations in seconds; 0 for no entries"""
    return sum(entry.duration for entry in entries)


def percentage_of_total(bucket_duration: int, grand_total: int) -> float:
    """Share of ``grand_total`` in percent; 0 when there is no total"""
    if grand_total == 0:
        return 0.0
    return bucket_duration / grand_total * 100


def filter_by_project(entries: Iterable[TimeEntry], project_id: Optional[str] = None) -> List[TimeEntry]:
    """Keep entries of one project; all entries when ``project_id`` is None"""
    return [entry for entry in entries if not project_id or entry.project_id == project_id]


def group_by_user_and_project(entries: Iterable[TimeEntry],
                              resolve_project_name: NameResolver,
                              resolve_user_name: NameResolver) -> List[ProjectTimeAggregate]:
    """One bucket per (user_id, project_id) pair"""
    buckets: Dict[Tuple[str, Optional[str]], ProjectTimeAggregate] = {}

    for entry in entries:
        key = (entry.user_id, entry.project_id)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = ProjectTimeAggregate(
                project_id=entry.project_id,
                project_name=_resolve(resolve_project_name, entry.project_id, NO_PROJECT),
                user_id=entry.user_id,
                user_name=resolve_user_name(entry.user_id)
            )
            buckets[key] = bucket
        bucket.total_duration += entry.duration
        bucket.entries.append(entry)

    return list(buckets.values())


def group_by_task(entries: Iterable[TimeEntry],
                  resolve_task_name: NameResolver,
                  resolve_project_name: NameResolver) -> List[TaskTimeAggregate]:
    """
    One bucket per task_id.

    The bucket's project is the project of its first entry. Entries booked
    directly on a project (no task) share a single task_id=None bucket.
    """
    buckets: Dict[Optional[str], TaskTimeAggregate] = {}

    for entry in entries:
        bucket = buckets.get(entry.task_id)
        if bucket is None:
            bucket = TaskTimeAggregate(
                task_id=entry.task_id,
                task_name=_resolve(resolve_task_name, entry.task_id, NO_TASK),
                project_id=entry.project_id,
                project_name=_resolve(resolve_project_name, entry.project_id, NO_PROJECT)
            )
            buckets[entry.task_id] = bucket
        bucket.total_duration += entry.duration
        bucket.entries.append(entry)

    return list(buckets.values())


def group_by_user_and_task(entries: Iterable[TimeEntry],
                           resolve_user_name: NameResolver,
                           resolve_task_name: NameResolver,
                           resolve_project_name: NameResolver) -> List[UserTaskAggregate]:
    """Timesheet grid rows: users, each with their task buckets"""
    per_user: Dict[str, List[TimeEntry]] = {}
    for entry in entries:
        per_user.setdefault(entry.user_id, []).append(entry)

    groups = []
    for user_id, user_entries in per_user.items():
        groups.append(UserTaskAggregate(
            user_id=user_id,
            user_name=resolve_user_name(user_id),
            total_duration=total_duration(user_entries),
            tasks=group_by_task(user_entries, resolve_task_name, resolve_project_name)
        ))
    return groups


def group_by_project_members(aggregates: Iterable[ProjectTimeAggregate]) -> List[ProjectMembersAggregate]:
    """Team view: fold user×project buckets into one group per project"""
    projects: Dict[Optional[str], ProjectMembersAggregate] = {}

    for aggregate in aggregates:
        group = projects.get(aggregate.project_id)
        if group is None:
            group = ProjectMembersAggregate(
                project_id=aggregate.project_id,
                project_name=aggregate.project_name
            )
            projects[aggregate.project_id] = group
        group.members.append(aggregate)
        group.total_duration += aggregate.total_duration

    return list(projects.values())


def daily_totals(entries: Iterable[TimeEntry], days: Iterable[datetime.date]) -> Dict[datetime.date, int]:
    """Seconds per day for each of ``days``; days without entries map to 0"""
    totals = {to_date(day): 0 for day in days}
    for entry in entries:
        if entry.date in totals:
            totals[entry.date] += entry.duration
    return totals


def day_timesheet(ledger: TimeLedger, day: datetime.date,
                  user_id: Optional[str] = None) -> DayTimesheet:
    entries = day_entries(ledger, day, user_id)
    return DayTimesheet(date=to_date(day), entries=entries, total_duration=total_duration(entries))


def week_timesheet(ledger: TimeLedger, cursor: WeekCursor,
                   user_id: Optional[str] = None) -> WeekTimesheet:
    """The cursor's week with its entries, split per day"""
    entries = week_entries(ledger, cursor, user_id)
    days = []
    for day in cursor.week_days():
        day_list = [entry for entry in entries if entry.date == day]
        days.append(DayTimesheet(date=day, entries=day_list, total_duration=total_duration(day_list)))

    return WeekTimesheet(
        week_start=cursor.week_start,
        week_end=cursor.week_end,
        entries=entries,
        total_duration=total_duration(entries),
        days=days
    )
