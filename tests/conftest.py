"""Global test fixtures and environment setup."""

from __future__ import annotations

import os

import pytest
from fastapi.testclient import TestClient

from espresso_sim.app import create_app
from espresso_sim.config import AppConfig
from espresso_sim.services.extraction_service import ExtractionService
from espresso_sim.storage.metrics_store import MetricsStore

# Keep a developer's shell or .env from attaching a journal to every test app.
os.environ.pop("METRICS_JOURNAL_PATH", None)


@pytest.fixture()
def store() -> MetricsStore:
    return MetricsStore()


@pytest.fixture()
def service(store: MetricsStore) -> ExtractionService:
    return ExtractionService(store)


@pytest.fixture()
def client() -> TestClient:
    return TestClient(create_app(config=AppConfig()))
