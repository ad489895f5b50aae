"""Pytest configuration and fixtures for Gift Tracker tests."""

import os
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, scoped_session

from gift_tracker.models.base import Base
from gift_tracker.services.database import get_session_factory  # noqa: F401  registers SQLite pragmas


@pytest.fixture(scope="function")
def test_db():
    """Provide a clean test database for each test function.

    This fixture:
    1. Creates an in-memory SQLite database
    2. Creates all tables
    3. Points the service layer's session factory at it
    4. Drops all tables after the test completes
    """
    engine = create_engine("sqlite:///:memory:", echo=False)

    import gift_tracker.models  # noqa: F401

    Base.metadata.create_all(engine)

    session_factory = sessionmaker(bind=engine, expire_on_commit=False)
    Session = scoped_session(session_factory)

    # Monkey-patch the global session factory for tests
    import gift_tracker.services.database as db_module

    original_get_session_factory = db_module.get_session_factory
    db_module.get_session_factory = lambda: Session

    yield Session

    Session.remove()
    Base.metadata.drop_all(engine)
    engine.dispose()

    db_module.get_session_factory = original_get_session_factory


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep tests away from the user's real configuration and database."""
    from gift_tracker.utils import config

    for name in list(os.environ):
        if name.startswith("GIFT_TRACKER_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("GIFT_TRACKER_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("GIFT_TRACKER_APP_URL", "https://gifts.example.com")
    config.reset_config()
    yield
    config.reset_config()


@pytest.fixture(scope="function")
def sample_profile(test_db):
    """Provide a profile with notifications enabled."""
    from gift_tracker.services import profile_service

    return profile_service.create_profile("ann@example.com", display_name="Ann")


@pytest.fixture(scope="function")
def sample_recipient(test_db, sample_profile):
    """Provide a recipient born 1990-03-15 owned by sample_profile."""
    from gift_tracker.services import recipient_service

    return recipient_service.create_recipient(
        sample_profile.id,
        {
            "name": "Bob Jones",
            "birthday": date(1990, 3, 15),
            "relationship": "Friend",
            "tags": "books, coffee",
            "notes": "Prefers paperbacks",
        },
        today=date(2024, 3, 1),
    )


class RecordingSender:
    """Email sender that records messages and can fail for chosen addresses."""

    def __init__(self, fail_for=()):
        self.fail_for = set(fail_for)
        self.messages = []

    def send(self, to_address, message):
        from gift_tracker.services.exceptions import EmailSendError

        if to_address in self.fail_for:
            raise EmailSendError(to_address, "connection refused")
        self.messages.append((to_address, message))


@pytest.fixture
def recording_sender():
    """Provide an email sender that records instead of sending."""
    return RecordingSender()


@pytest.fixture
def make_sender():
    """Factory for senders that fail for specific addresses."""
    return RecordingSender
