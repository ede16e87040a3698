"""
Shared fixtures for the roombot test suite.
"""

import sys
from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from roombot.config import KST
from roombot.models import Base
from roombot.providers.base import BookingProvider, ChatProvider, NluProvider
from roombot.store import ConversationStore


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: fast tests without I/O")
    config.addinivalue_line("markers", "integration: tests wiring several components together")


class InlineExecutor:
    """Executor stand-in that runs submitted work immediately."""

    def __init__(self):
        self.submitted = []

    def submit(self, fn, *args, **kwargs):
        self.submitted.append(fn)
        return fn(*args, **kwargs)

    def shutdown(self, wait=True):
        pass


@pytest.fixture
def now() -> datetime:
    return datetime(2024, 6, 1, 9, 0, tzinfo=KST)


@pytest.fixture
def booking():
    mock = MagicMock(spec=BookingProvider)
    mock.get_freebusy.return_value = []
    mock.create_booking.return_value = True
    mock.search_by_user.return_value = []
    mock.search_by_site.return_value = []
    mock.cancel_booking.return_value = True
    return mock


@pytest.fixture
def nlu():
    return MagicMock(spec=NluProvider)


@pytest.fixture
def chat():
    return MagicMock(spec=ChatProvider)


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False)
    engine.dispose()


@pytest.fixture
def store(session_factory) -> ConversationStore:
    return ConversationStore(session_factory)


@pytest.fixture
def inline_executor() -> InlineExecutor:
    return InlineExecutor()


def make_reservation(eventid, start_ms, end_ms, userid="U1", roomid="room1/camomile", purpose="quick review"):
    return {
        "id": eventid,
        "roomid": roomid,
        "start": start_ms,
        "end": end_ms,
        "purpose": purpose,
        "user": {"userid": userid},
    }
