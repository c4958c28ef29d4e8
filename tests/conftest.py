"""
Shared fixtures: a fresh SQLite claim store per test and a TestClient wired to it.

Settings are read at import time, so the environment is set before any
neighbourly module is imported.
"""
import os
import tempfile

os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(tempfile.gettempdir(), 'neighbourly-tests.db')}"
os.environ["JWT_SECRET"] = "test_secret_for_neighbourly_tests_that_is_long_enough"
os.environ["PRIMARY_DOMAINS"] = "orgdomain.com, events.example.org"
os.environ["DATA_ENTRY_UNCLAIM_TOKEN"] = "s3cret-token"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from neighbourly.core.ratelimit import limiter
from neighbourly.core.security import make_token
from neighbourly.db.base import Base
from neighbourly.db.session import get_db
from neighbourly.main import app
from neighbourly.services.claim_service import ClaimService

VOLUNTEER = "alice@example.com"
OTHER_VOLUNTEER = "bob@example.com"
ORGANIZER = "events@orgdomain.com"
DOMAINS = ["orgdomain.com", "events.example.org"]


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'claims.db'}")
    Base.metadata.create_all(engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def service(db):
    return ClaimService(db, domains=DOMAINS)


@pytest.fixture
def client(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    limiter.reset()
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(identity: str) -> dict:
    return {"Authorization": f"Bearer {make_token(identity)}"}
