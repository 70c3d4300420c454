"""Shared fixtures: mock-mode settings, an in-memory store and an HTTP client."""

import pytest
from fastapi.testclient import TestClient

from blob_gateway.config.settings import Settings
from blob_gateway.infrastructure.storage.client import MockStorageClient
from blob_gateway.main import create_app


@pytest.fixture
def settings() -> Settings:
    """Mock-mode settings that never read a local .env file."""
    return Settings(
        _env_file=None,
        azure_container_name="uploads",
        storage_mock_mode=True,
    )


@pytest.fixture
def store() -> MockStorageClient:
    # Tiny chunks so every download exercises multi-chunk streaming
    return MockStorageClient(container_name="uploads", chunk_size=4)


@pytest.fixture
def client(settings: Settings, store: MockStorageClient):
    """TestClient with lifespan running, backed by the in-memory store."""
    app = create_app(settings=settings, storage=store)
    with TestClient(app) as test_client:
        yield test_client
