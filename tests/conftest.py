"""
Test configuration and fixtures
"""

import pytest
from fastapi.testclient import TestClient

from tests.fake_backend import app
from winedash.client import WineApiClient
from winedash.config import DashboardSettings


@pytest.fixture
def settings():
    """Settings that never read the caller's environment"""
    return DashboardSettings(_env_file=None, api_base_url="http://testserver")


@pytest.fixture
def backend():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def api(settings, backend):
    """WineApiClient talking to the in-memory backend"""
    return WineApiClient(settings, http=backend)
