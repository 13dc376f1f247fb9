from datetime import datetime, timezone

import pytest


@pytest.fixture
def now():
    # Wednesday
    return datetime(2024, 3, 20, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def client():
    from fastapi.testclient import TestClient

    from tripscope.main import app

    return TestClient(app)
