"""
Pytest configuration and fixtures.
"""

import asyncio
import datetime
import sys
from pathlib import Path
from typing import Optional

import pytest
import pytest_asyncio
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

# Add project root
sys.path.insert(0, str(Path(__file__).parent.parent))

from timeledger.infra.db import Base
from timeledger.infra.tick_sources import ManualTickSource
from timeledger.services.directory import NameDirectory
from timeledger.services.ledger_service import TimeLedger
from timeledger.services.timer_service import TimerService

# A Monday
MONDAY = datetime.date(2026, 10, 19)


class FakeClock:
    """Callable clock that only moves when told to"""

    def __init__(self, start: datetime.datetime):
        self.now = start

    def __call__(self) -> datetime.datetime:
        return self.now

    def advance(self, seconds: int):
        self.now += datetime.timedelta(seconds=seconds)


class FailingRepository:
    """
    Repository stand-in whose writes fail while ``failing`` is set.

    ``error`` is what a failing write raises; ``delay`` makes every write
    wait that many seconds first.
    """

    def __init__(self, failing: bool = True, error: Optional[BaseException] = None, delay: float = 0.0):
        self.failing = failing
        self.error = error if error is not None else SQLAlchemyError("database is locked")
        self.delay = delay
        self.created = []

    async def _write(self):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.failing:
            raise self.error

    async def create(self, entry):
        await self._write()
        self.created.append(entry)
        return entry

    async def update(self, entry):
        await self._write()
        return entry

    async def delete(self, entry_id):
        await self._write()
        return True

    async def get_all(self):
        return list(self.created)


@pytest_asyncio.fixture
async def db_engine():
    """Create an in-memory SQLite database for testing"""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Create a new session for a test"""
    async_session = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture
def clock():
    return FakeClock(datetime.datetime.combine(MONDAY, datetime.time(9, 0)))


@pytest.fixture
def directory():
    return NameDirectory(
        users={"user-1": "John Doe", "user-2": "Jane Smith"},
        tasks={
            "task-1": "Design homepage",
            "task-2": "Implement authentication",
            "task-3": "Create timesheet view",
        },
        projects={"project-1": "LogicFlow Rebuild", "project-2": "Mobile App"},
        task_projects={"task-1": "project-1", "task-2": "project-1", "task-3": "project-2"},
    )


@pytest.fixture
def ledger(directory, clock):
    return TimeLedger(resolve_project=directory.resolve_project, clock=clock)


@pytest.fixture
def tick_source():
    return ManualTickSource()


@pytest.fixture
def timer(ledger, tick_source, clock):
    return TimerService(ledger, current_user_id=lambda: "user-1", tick_source=tick_source, clock=clock)


@pytest.fixture
def failing_repository():
    return FailingRepository()


@pytest.fixture
def failing_ledger(directory, clock, failing_repository):
    return TimeLedger(repository=failing_repository, resolve_project=directory.resolve_project, clock=clock)
