"""
Week Cursor - the week currently being viewed.

The anchor is always the first day of a 7-day week (Monday unless
configured otherwise).
"""

import datetime
from typing import Callable, List, Optional, Tuple

from timeledger.utils import to_date

MONDAY = 0
DAYS_PER_WEEK = 7


def start_of_week(day: datetime.date, week_start_day: int = MONDAY) -> datetime.date:
    """First day of the week containing ``day``"""
    day = to_date(day)
    offset = (day.weekday() - week_start_day) % DAYS_PER_WEEK
    return day - datetime.timedelta(days=offset)


class WeekCursor:
    """Holds the anchor of the viewed week; read by the aggregation functions"""

    def __init__(self, anchor: Optional[datetime.date] = None, week_start_day: int = MONDAY,
                 today: Callable[[], datetime.date] = datetime.date.today):
        if not 0 <= week_start_day < DAYS_PER_WEEK:
            raise ValueError(f"week_start_day must be 0-6, got {week_start_day}")
        self.week_start_day = week_start_day
        self.today = today
        self.week_start = start_of_week(anchor or today(), week_start_day)

    def __repr__(self) -> str:
        return f"WeekCursor(week_start={self.week_start.isoformat()})"

    def set_week(self, day: datetime.date) -> datetime.date:
        """Move to the week containing ``day``"""
        self.week_start = start_of_week(day, self.week_start_day)
        return self.week_start

    def jump_to_today(self) -> datetime.date:
        return self.set_week(self.today())

    def next_week(self) -> datetime.date:
        self.week_start += datetime.timedelta(days=DAYS_PER_WEEK)
        return self.week_start

    def previous_week(self) -> datetime.date:
        self.week_start -= datetime.timedelta(days=DAYS_PER_WEEK)
        return self.week_start

    @property
    def week_end(self) -> datetime.date:
        return self.week_start + datetime.timedelta(days=DAYS_PER_WEEK - 1)

    def current_week_range(self) -> Tuple[datetime.date, datetime.date]:
        """Inclusive (first day, last day) of the viewed week"""
        return self.week_start, self.week_end

    def week_days(self) -> List[datetime.date]:
        """The seven days of the viewed week, in order"""
        return [self.week_start + datetime.timedelta(days=i) for i in range(DAYS_PER_WEEK)]

    def contains(self, day: datetime.date) -> bool:
        return self.week_start <= to_date(day) <= self.week_end
