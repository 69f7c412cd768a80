from __future__ import annotations

import os
import tempfile
from pathlib import Path

# Settings are read at import time, so the test database must be configured first.
_DB_DIR = Path(tempfile.mkdtemp(prefix="taskboard-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR / 'taskboard.db'}"
os.environ["DATABASE_SSL"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from taskboard.core.database import engine
from taskboard.main import app

from .helpers import register, reset_schema


@pytest.fixture
def client() -> TestClient:
    with TestClient(app) as test_client:
        test_client.portal.call(reset_schema)
        yield test_client
        # Pooled connections belong to this client's event loop.
        test_client.portal.call(engine.dispose)


@pytest.fixture
def alice(client: TestClient) -> dict[str, str]:
    return register(client, "alice@example.com", "Alice")


@pytest.fixture
def bob(client: TestClient) -> dict[str, str]:
    return register(client, "bob@example.com", "Bob")
