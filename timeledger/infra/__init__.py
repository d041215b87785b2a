"""Infrastructure layer - Database, persistence and configuration"""

from .db import DatabaseEngine
from .models import TimeEntryModel
from .repository import TimeEntryRepository

__all__ = ["DatabaseEngine", "TimeEntryModel", "TimeEntryRepository"]
