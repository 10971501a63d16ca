"""Pytest configuration and fixtures shared across all test modules.

Environment variables must be in place before ``app.core.config`` is
imported, because ``settings`` is built at import time.
"""

import os

os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("APP_API_KEY_REQUIRED", "true")
os.environ.setdefault("APP_API_KEYS", "test-api-key-123,test-api-key-456")
os.environ.setdefault("APP_RATE_LIMIT_ENABLED", "true")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.core.app_factory import create_app  # noqa: E402


@pytest.fixture
def app():
    """Fresh application with its own limiter and throttle state."""
    return create_app()


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def api_key_headers() -> dict[str, str]:
    return {"X-API-Key": "test-api-key-123"}
