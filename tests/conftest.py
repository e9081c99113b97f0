"""Shared fixtures for the system monitor tests."""

import pytest
from fastapi.testclient import TestClient

from main import create_app
from tests.helpers.fakes import FakeProvider


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def client(fake_provider: FakeProvider) -> TestClient:
    return TestClient(create_app(fake_provider))
