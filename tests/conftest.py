"""
Shared fixtures.

Every test runs against the in-memory inventory unless it builds its own
SQLite engine; breakers and process-wide caches are reset around each test
so one test's failures never leak into the next.
"""

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import _in_memory_bundle
from app.config import Settings, get_settings
from app.infrastructure.cache.shared_cache import get_shared_cache
from app.infrastructure.circuit_breaker import reset_all_breakers
from app.main import app


def make_settings(**overrides) -> Settings:
    """Settings that ignore any local .env file."""
    values = {"use_in_memory": True}
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture(autouse=True)
def reset_circuit_breakers():
    """Close every breaker before and after each test."""
    reset_all_breakers()
    yield
    reset_all_breakers()


@pytest.fixture(autouse=True)
def reset_process_state():
    """Fresh demo bookings and an empty shared cache for each test."""
    _in_memory_bundle.cache_clear()
    get_shared_cache.cache_clear()
    yield
    _in_memory_bundle.cache_clear()
    get_shared_cache.cache_clear()


@pytest.fixture
def settings_factory():
    return make_settings


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def client(settings: Settings) -> Generator[TestClient, None, None]:
    """FastAPI TestClient wired to the in-memory inventory."""
    app.dependency_overrides[get_settings] = lambda: settings

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def in_memory_bundle():
    return _in_memory_bundle()
