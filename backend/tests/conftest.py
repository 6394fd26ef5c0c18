import pytest
from fastapi.testclient import TestClient #fake http client that calls the FastAPI routes without running a real server.

from smarter_scheduler.main import app


@pytest.fixture() #test client
def client():
    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear() #drop engine config overrides so tests stay isolated
