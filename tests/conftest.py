import os
import sys
from datetime import datetime, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Add the project root to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from scheduling_core import models  # noqa: F401,E402
from scheduling_core.core.config import Settings  # noqa: E402
from scheduling_core.core.database import Base  # noqa: E402
from scheduling_core.services.locking import SlotLockManager  # noqa: E402
from scheduling_core.services.scheduler import SchedulerService  # noqa: E402
from scheduling_core.utils.time import BusinessClock  # noqa: E402

# Monday 2025-06-02, 08:00 UTC
FROZEN_NOW = datetime(2025, 6, 2, 8, 0, tzinfo=timezone.utc)


class FrozenNow:
    """Settable replacement for ``datetime.now(timezone.utc)``."""

    def __init__(self, value: datetime):
        self.value = value

    def __call__(self) -> datetime:
        return self.value

    def set(self, *args):
        self.value = datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def frozen_now():
    return FrozenNow(FROZEN_NOW)


@pytest.fixture
def clock(frozen_now):
    """Business clock pinned to Monday 2025-06-02 08:00 UTC."""
    return BusinessClock("UTC", now_func=frozen_now)


@pytest.fixture
def test_settings():
    return Settings(
        DATABASE_URL="sqlite+aiosqlite://",
        BUSINESS_TIMEZONE="UTC",
        HOLIDAY_COUNTRY_CODE=None,
        SLOT_LOCK_BACKEND="memory",
        LOG_JSON=False,
    )


@pytest.fixture
async def engine(tmp_path):
    """File-backed SQLite engine so several sessions can share one database."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'scheduling.db'}",
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    """Create a fresh database session for each test."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def lock_manager():
    return SlotLockManager()


@pytest.fixture
def scheduler(db, test_settings, clock, lock_manager):
    return SchedulerService(
        db, settings=test_settings, clock=clock, lock_manager=lock_manager
    )


# Import the directory fixtures to make them available
pytest_plugins = ["tests.fixtures.directory_fixtures"]
