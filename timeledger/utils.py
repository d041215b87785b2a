import datetime
import sys
from pathlib import Path


def get_resource_path(relative_path: str) -> Path:
    """
    Get absolute path to resource, works for dev and for PyInstaller.

    Args:
        relative_path: Relative path from the package root (e.g., "resources/templates")

    Returns:
        Absolute Path object
    """
    if hasattr(sys, '_MEIPASS'):
        # PyInstaller creates a temp folder and stores path in _MEIPASS
        base_path = Path(sys._MEIPASS) / "timeledger"
    else:
        # This file is in timeledger/utils.py, so the package root is its parent
        base_path = Path(__file__).parent.absolute()

    return base_path / relative_path


def format_clock(seconds: int) -> str:
    """Format seconds as HH:MM:SS"""
    hours, remainder = divmod(seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_duration(seconds: int) -> str:
    """Format seconds the way the timesheet shows them: '1h 30m', '45m', '2h'"""
    hours, remainder = divmod(seconds, 3600)
    minutes = remainder // 60
    if hours == 0:
        return f"{minutes}m"
    if minutes == 0:
        return f"{hours}h"
    return f"{hours}h {minutes}m"


def format_hours(seconds: int) -> str:
    """Decimal hours with two places, e.g. 5400 -> '1.50'"""
    return f"{seconds / 3600:.2f}"


def to_date(value) -> datetime.date:
    """Collapse a datetime to its calendar day; dates pass through unchanged"""
    if isinstance(value, datetime.datetime):
        return value.date()
    return value
