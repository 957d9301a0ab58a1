"""Pytest configuration and shared fixtures."""

from collections.abc import Generator

from fastapi import FastAPI
from fastapi.testclient import TestClient
import pytest

from canonical_log import Settings, binding
from canonical_log.core.config import reset_settings
from tests.helpers import RecordingSink, build_app


@pytest.fixture(autouse=True)
def reset_state() -> Generator[None, None, None]:
    """Each test starts with no bound event and default settings."""
    binding.clear()
    reset_settings()
    yield
    binding.clear()
    reset_settings()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def settings(sink: RecordingSink) -> Settings:
    """Settings writing to an in-memory sink, keeping everything."""
    return Settings(sinks=[sink])


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    return build_app(settings)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """Test client that turns unhandled errors into 500 responses like a real server."""
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
