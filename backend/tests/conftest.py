"""Shared fixtures: an in-memory database per test and an API client bound to it."""
import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_FILE"] = ""
os.environ["ADMIN_AUTH_ENABLED"] = "true"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from blitzweek.core.config import settings
from blitzweek.core.security import create_access_token
from blitzweek.db.base import Base
from blitzweek.db.session import get_db
from blitzweek.main import app
import blitzweek.models.registration  # noqa: F401  registers the tables


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    token = create_access_token({"sub": settings.ADMIN_EMAIL, "role": "admin"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_candidate():
    """Build a valid registration body, overriding selected fields."""
    def _make(**overrides):
        candidate = {
            "name": "Alice",
            "ldapId": "alice@iitb.ac.in",
            "rollNumber": "21b1234",
            "branch": "Computer Science and Engineering",
            "year": "3rd Year",
            "interestedEvents": ["ScaleUp Blitz"],
        }
        candidate.update(overrides)
        return candidate
    return _make
