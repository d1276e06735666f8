"""Shared fixtures: an isolated repository root per test."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from syos_repo.core.config import RepositorySettings
from syos_repo.main import create_app
from syos_repo.services.repository_service import RepositoryService
from syos_repo.storage.repository_store import RepositoryStore


@pytest.fixture
def settings(tmp_path) -> RepositorySettings:
    return RepositorySettings(repo_root=tmp_path / "repository", port=3000)


@pytest.fixture
def store(settings) -> RepositoryStore:
    store = RepositoryStore(settings)
    store.initialize()
    return store


@pytest.fixture
def service(store) -> RepositoryService:
    return RepositoryService(store)


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as test_client:
        yield test_client
