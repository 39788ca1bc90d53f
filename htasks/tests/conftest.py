"""
Shared fixtures: an in-memory SQLite database and an API client.
"""
import os
import tempfile

# Must be set before htasks modules create the engine and read the API key
os.environ["HTASKS_DATABASE_URL"] = "sqlite://"
os.environ["HTASKS_API_KEY"] = "test-api-key"
os.environ.setdefault("HTASKS_LOG_DIR", tempfile.gettempdir())

import pytest
from datetime import date, datetime, timedelta

from htasks.database import Base, engine, SessionLocal
from htasks import models  # noqa: F401  (registers tables)
from htasks.models import Completion, Category
from htasks.repositories.settings_repository import SettingsRepository


@pytest.fixture
def db_session():
    """Fresh schema per test"""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def default_settings(db_session):
    settings = SettingsRepository.get(db_session)
    settings.timezone = ""
    settings.daily_prompt_quota = 15
    db_session.commit()
    return settings


@pytest.fixture
def today():
    return date(2026, 1, 30)


@pytest.fixture
def yesterday(today):
    return today - timedelta(days=1)


@pytest.fixture
def now(today):
    """Reference time: 10:00 on the fixed test day"""
    return datetime.combine(today, datetime.min.time()) + timedelta(hours=10)


@pytest.fixture
def client(db_session, default_settings):
    from fastapi.testclient import TestClient
    from htasks.main import app

    test_client = TestClient(app)
    test_client.headers.update({"X-API-Key": os.environ["HTASKS_API_KEY"]})
    return test_client


def add_completion(db_session, entity_id, completed_at, category_id=None, due_at=None):
    """Insert a completion row directly"""
    completion = Completion(
        entity_id=entity_id,
        completed_at=completed_at,
        category_id=category_id,
        due_at=due_at
    )
    db_session.add(completion)
    db_session.commit()
    return completion


def add_categories(db_session, count):
    for i in range(count):
        db_session.add(Category(name=f"Category {i}", color="blue"))
    db_session.commit()
