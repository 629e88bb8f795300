# backend/tests/routes/conftest.py
"""Route-level fixtures: a TestClient bound to the per-test database session."""

import pytest
from fastapi.testclient import TestClient

from garage_booking.api.dependencies.database import get_db
from garage_booking.main import app


@pytest.fixture
def client(db):
    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.pop(get_db, None)
