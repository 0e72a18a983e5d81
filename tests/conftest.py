"""Global test fixtures and utilities for learnquest tests"""
import pytest
from unittest.mock import AsyncMock, MagicMock
from datetime import date, datetime, timedelta, timezone

from learnquest.db.store import InMemoryProgressStore
from learnquest.models.progress import LearnerProgress
from learnquest.services.progress_service import ProgressionEngine


# ============================================================================
# Time Fixtures
# ============================================================================

class FakeClock:
    """Controllable clock returning aware datetimes"""

    def __init__(self, current: datetime):
        self.current = current

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current


@pytest.fixture
def clock():
    """Clock fixed at 2024-01-02 09:00 UTC"""
    return FakeClock(datetime(2024, 1, 2, 9, 0, 0, tzinfo=timezone.utc))


# ============================================================================
# Learner & Store Fixtures
# ============================================================================

@pytest.fixture
def test_learner_id():
    """Standard test learner ID"""
    return "learner-123"


@pytest.fixture
def memory_store(test_learner_id):
    """In-memory store for an authenticated learner"""
    return InMemoryProgressStore(test_learner_id)


@pytest.fixture
def anonymous_store():
    """In-memory store without an authenticated learner"""
    return InMemoryProgressStore(None)


@pytest.fixture
def fresh_progress():
    """New learner whose last visit was on the clock's date"""
    return LearnerProgress(last_login_date=date(2024, 1, 2))


@pytest.fixture
def engine(memory_store, fresh_progress, clock):
    """ProgressionEngine over the in-memory store, UTC streaks"""
    return ProgressionEngine(memory_store, progress=fresh_progress, clock=clock, streak_timezone="UTC")


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
def mock_db_cursor():
    """Mock database cursor with standard query results"""
    cursor = AsyncMock()
    cursor.fetchone = AsyncMock(return_value=None)
    cursor.fetchall = AsyncMock(return_value=[])
    cursor.execute = AsyncMock()
    return cursor


@pytest.fixture
def mock_db_connection(mock_db_cursor):
    """Mock connection whose cursor() is an async context manager"""
    conn = MagicMock()
    conn.commit = AsyncMock()
    conn.cursor.return_value.__aenter__.return_value = mock_db_cursor
    conn.cursor.return_value.__aexit__.return_value = False
    return conn


@pytest.fixture
def mock_database(mock_db_connection):
    """Mock Database whose connection() is an async context manager"""
    database = MagicMock()
    database.connection.return_value.__aenter__.return_value = mock_db_connection
    database.connection.return_value.__aexit__.return_value = False
    return database
