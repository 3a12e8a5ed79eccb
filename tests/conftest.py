"""Shared pytest fixtures for tubedesk tests."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tubedesk.api.app import create_app
from tubedesk.config import Settings
from tubedesk.db.client import StorageClient
from tubedesk.db.schema import Base


@pytest.fixture
def engine():
    """Create an in-memory SQLite engine shared across threads."""
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def session(engine):
    """Create a database session for testing."""
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def storage(engine):
    """Storage client over the in-memory engine."""
    return StorageClient(engine)


@pytest.fixture
def settings_factory():
    """Build Settings without reading the process environment's .env file."""

    def make(**overrides) -> Settings:
        values = {
            "DATABASE_URL": "sqlite://",
            "DATABASE_SERVICE_KEY": "test-service-key",
            "APP_ENV": "test",
            "SERVER_ADDON": "none",
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return make


@pytest.fixture
def settings(settings_factory):
    return settings_factory()


@pytest.fixture
def client(settings, storage):
    """Test client for an app with no add-ons."""
    return TestClient(create_app(settings, storage=storage))
