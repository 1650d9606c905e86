"""Pytest fixtures: one app per test, state files under tmp_path."""

import pytest
from fastapi.testclient import TestClient

from showready.config import Settings
from showready.model.store import LastEventStore, StateStore
from showready.server import create_app

JSON = {"Accept": "application/json"}


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(data_dir=tmp_path / "fixtures")


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app, follow_redirects=False)


@pytest.fixture
def store(settings) -> StateStore:
    return StateStore(settings.db_file)


@pytest.fixture
def last_event(settings) -> LastEventStore:
    return LastEventStore(settings.last_event_file)
