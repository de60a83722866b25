"""
hang: Test Configuration (conftest.py)
=========================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_log: MagicMock standing in for a hang Logger
    ├── service: Service wired to mock_log
    ├── app: FastAPI app built around `service`
    └── client: HTTPX AsyncClient talking to `app` in-process
"""

import os
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Before any hang import: keep test runs independent of a developer's .env
os.environ["HANG_PROCESS_NAME"] = "hang-test"
os.environ["HANG_LOG_LEVEL"] = "WARNING"


@pytest.fixture
def mock_log():
    """
    A MagicMock satisfying the Logger protocol.

    with_fields() returns the same mock so assertions can be made on a single
    object regardless of how many field sets the code attaches.
    """
    log = MagicMock()
    log.with_fields.return_value = log
    return log


@pytest.fixture
def service(mock_log):
    from hang.service import Service

    return Service(log=mock_log, process_name="test-service")


@pytest.fixture
def app(service):
    from hang.main import create_app

    return create_app(service)


@pytest_asyncio.fixture
async def client(app):
    """
    Async HTTP client routed directly to the ASGI app (no server, no sockets).

    Usage:
        async def test_livecheck(client):
            response = await client.get("/livecheck")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
