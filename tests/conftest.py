# tests/conftest.py
from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from notelock.core.settings import Settings
from notelock.main import create_app
from notelock.services.note_store import EphemeralNoteStore


class FakeClock:
    """Manually advanced clock standing in for ``time.monotonic``."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def build_settings(**overrides: object) -> Settings:
    values: dict[str, object] = {
        "note_life_hours": 24,
        "expire_interval_minutes": 5,
        "global_rate_window_seconds": 60,
        "global_rate_max": 50,
        "write_rate_window_seconds": 60,
        "write_rate_max": 5,
        "slowdown_window_seconds": 60,
        "slowdown_threshold": 1000,
        "slowdown_delay_seconds": 0.0,
        "slowdown_max_delay_seconds": 0.0,
        "public_base_url": "https://notes.test",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(clock: FakeClock) -> EphemeralNoteStore:
    return EphemeralNoteStore(clock=clock)


@pytest.fixture()
def test_settings() -> Settings:
    """Provide settings with small, test-friendly limits."""
    return build_settings()


@pytest.fixture()
def app(test_settings: Settings, clock: FakeClock) -> FastAPI:
    return create_app(test_settings, clock=clock)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client
