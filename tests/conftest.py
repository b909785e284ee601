"""Shared fixtures for Unlingo tests."""

import os

# Set test environment variables before any project imports
os.environ.setdefault("JWT_SECRET", "test-secret-for-unit-tests")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BLOB_STORAGE_BACKEND", "memory")
os.environ.setdefault("AUTH_PROVIDER", "local")

import pytest  # noqa: E402
from sqlmodel import Session  # noqa: E402

from api.auth.identity import Identity  # noqa: E402
from api.services.deletion_service import CascadeDeleter  # noqa: E402
from unlingo.storage import MemoryBlobStorage  # noqa: E402

from tests.db_utils import create_test_engine, make_workspace  # noqa: E402
from tests.fakes import RecordingScheduler  # noqa: E402


@pytest.fixture
def engine():
    engine = create_test_engine()
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def storage():
    return MemoryBlobStorage()


@pytest.fixture
def scheduler():
    return RecordingScheduler()


@pytest.fixture
def deleter(storage, scheduler):
    return CascadeDeleter(storage, scheduler=scheduler)


@pytest.fixture
def workspace(session):
    """Workspace bound to organization org_a, on free limits."""
    return make_workspace(session, "org_a")


@pytest.fixture
def other_workspace(session):
    """Workspace of a second tenant, org_b."""
    return make_workspace(session, "org_b")


@pytest.fixture
def identity():
    return Identity(subject="user_a", org_id="org_a")


@pytest.fixture
def other_identity():
    return Identity(subject="user_b", org_id="org_b")
