"""
Repository Pattern Implementation.

Architecture Decision: Why Repository Pattern?
Separates data access logic from the ledger's validation rules. Makes it easy to:
- Switch database implementations
- Run the ledger purely in memory in tests
- Change data sources (local DB to cloud API)
"""

import datetime
from typing import List, Optional

from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from timeledger.domain.models import TimeEntry
from timeledger.infra.db import TimeEntryModel


class TimeEntryRepository:
    """
    Handles all TimeEntry-related database operations.

    Converts between domain models (Pydantic) and ORM models (SQLAlchemy).
    """

    def __init__(self, session: AsyncSession):
        """
        Args:
            session: Session to run every operation in; it is closed after
                each operation and reopened by SQLAlchemy on next use
        """
        self.session = session

    async def create(self, entry: TimeEntry) -> TimeEntry:
        """Create a new time entry"""
        async with self.session as session:
            entry_model = TimeEntryModel(
                id=entry.id,
                task_id=entry.task_id,
                user_id=entry.user_id,
                project_id=entry.project_id,
                date=entry.date,
                start_time=entry.start_time,
                end_time=entry.end_time,
                duration=entry.duration,
                description=entry.description,
                is_manual=entry.is_manual,
                created_at=entry.created_at,
                updated_at=entry.updated_at
            )
            session.add(entry_model)
            await session.commit()
            await session.refresh(entry_model)
            return TimeEntry.model_validate(entry_model)

    async def update(self, entry: TimeEntry) -> Optional[TimeEntry]:
        """Update an existing time entry. Returns None if the id is unknown."""
        async with self.session as session:
            result = await session.execute(
                update(TimeEntryModel)
                .where(TimeEntryModel.id == entry.id)
                .values(
                    task_id=entry.task_id,
                    user_id=entry.user_id,
                    project_id=entry.project_id,
                    date=entry.date,
                    start_time=entry.start_time,
                    end_time=entry.end_time,
                    duration=entry.duration,
                    description=entry.description,
                    is_manual=entry.is_manual,
                    updated_at=entry.updated_at
                )
            )
            await session.commit()
            if result.rowcount == 0:
                return None
            return entry

    async def delete(self, entry_id: str) -> bool:
        """Delete a time entry by ID. Returns whether a row was removed."""
        async with self.session as session:
            result = await session.execute(
                delete(TimeEntryModel).where(TimeEntryModel.id == entry_id)
            )
            await session.commit()
            return result.rowcount > 0

    async def get_by_id(self, entry_id: str) -> Optional[TimeEntry]:
        """Get a specific entry by ID"""
        async with self.session as session:
            result = await session.execute(
                select(TimeEntryModel).where(TimeEntryModel.id == entry_id)
            )
            entry_model = result.scalar_one_or_none()
            return TimeEntry.model_validate(entry_model) if entry_model else None

    async def get_all(self) -> List[TimeEntry]:
        """Get all time entries in insertion order"""
        async with self.session as session:
            result = await session.execute(
                select(TimeEntryModel).order_by(TimeEntryModel.seq)
            )
            entry_models = result.scalars().all()
            return [TimeEntry.model_validate(em) for em in entry_models]

    async def get_in_window(self, start_date: datetime.date, end_date: datetime.date,
                            user_id: Optional[str] = None) -> List[TimeEntry]:
        """Get entries attributed to days in [start_date, end_date], optionally for one user"""
        async with self.session as session:
            query = select(TimeEntryModel).where(
                TimeEntryModel.date >= start_date,
                TimeEntryModel.date <= end_date
            )
            if user_id:
                query = query.where(TimeEntryModel.user_id == user_id)

            result = await session.execute(query.order_by(TimeEntryModel.seq))
            entry_models = result.scalars().all()
            return [TimeEntry.model_validate(em) for em in entry_models]
