"""Fixtures for API tests."""

import pytest
from falcon.testing import TestClient

from dynprops.config import Settings
from dynprops.main import create_dynprops_app

from tests.conftest import insert_hosts, users


@pytest.fixture
def app(service, engine):
    """Falcon WSGI app wired to the SQLite-backed property service."""
    insert_hosts(engine, users, [1, 2, 3])
    settings = Settings(cors_origins="http://localhost:3000")
    return create_dynprops_app(settings, property_service=service)


@pytest.fixture
def client(app) -> TestClient:
    """Falcon WSGI test client."""
    return TestClient(app)
