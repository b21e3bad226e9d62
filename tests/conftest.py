import os

# Settings are read at import time
os.environ.setdefault("POSTGRES_USER", "devmatch")
os.environ.setdefault("POSTGRES_PASSWORD", "devmatch")
os.environ.setdefault("SESSION_SECRET", "test-session-secret")
os.environ.setdefault("IDENTITY_WEBHOOK_SECRET", "test-identity-secret")

import pytest
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy.exc import IntegrityError
from app.models import User, Match


def _make_result(scalar=None, items=None, rows=None, rowcount=0):
    """Build a mock of what session.execute() returns."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = scalar
    result.scalar_one.return_value = scalar
    result.scalar.return_value = scalar
    result.scalars.return_value.all.return_value = items or []
    result.scalars.return_value.first.return_value = (items or [None])[0]
    result.all.return_value = rows or []
    result.rowcount = rowcount
    return result


def _integrity_error():
    return IntegrityError("INSERT", {}, Exception("duplicate key value violates unique constraint"))


@pytest.fixture
def make_result():
    return _make_result


@pytest.fixture
def integrity_error():
    return _integrity_error()


@pytest.fixture
def mock_session():
    session = AsyncMock()

    # Setup execute result
    mock_result = _make_result()

    # Configure session.execute to return this result when awaited
    session.execute.side_effect = None
    session.execute.return_value = mock_result

    # Standard methods
    session.add = MagicMock()
    session.refresh = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()

    # `async with session.begin_nested():` needs a plain async context manager
    session.begin_nested = MagicMock()

    return session


@pytest.fixture
def mock_async_session_local(mock_session, monkeypatch):
    """Mock AsyncSessionLocal to return a mock session context manager."""
    mock_factory = MagicMock()
    mock_factory.return_value.__aenter__.return_value = mock_session

    # Patch in all files that use AsyncSessionLocal
    targets = [
        "app.api.auth.AsyncSessionLocal",
        "app.api.swipes.AsyncSessionLocal",
        "app.api.matches.AsyncSessionLocal",
        "app.api.realtime.AsyncSessionLocal",
    ]
    for target in targets:
        try:
            monkeypatch.setattr(target, mock_factory)
        except (AttributeError, ImportError):
            pass

    return mock_factory


@pytest.fixture(autouse=True)
def auto_mock_db(mock_async_session_local):
    """Automatically use mock_async_session_local for all tests."""
    return mock_async_session_local


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    from app.core.rate_limiter import rate_limiter
    rate_limiter.reset()
    yield
    rate_limiter.reset()


@pytest.fixture
def alice():
    return User(id="alice", email="alice@example.com", first_name="Alice", last_name="Dev")


@pytest.fixture
def bob():
    return User(id="bob", email="bob@example.com", first_name="Bob", last_name="Ops")


@pytest.fixture
def carol():
    return User(id="carol", email="carol@example.com", first_name="Carol")


@pytest.fixture
def alice_bob_match(alice, bob):
    return Match(
        id=7,
        user1_id="bob",
        user2_id="alice",
        user_low_id="alice",
        user_high_id="bob",
        is_active=True,
        user1=bob,
        user2=alice,
    )
