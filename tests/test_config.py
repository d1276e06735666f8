from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from syos_repo.core.config import RepositorySettings


def test_settings_derive_paths_and_default_url(tmp_path) -> None:
    settings = RepositorySettings(repo_root=tmp_path, port=4000)

    assert settings.artifact_root == tmp_path / "packages"
    assert settings.manifest_path == tmp_path / "manifest.json"
    assert settings.public_url == "http://localhost:4000"


def test_settings_base_url_strips_trailing_slash(tmp_path) -> None:
    settings = RepositorySettings(repo_root=tmp_path, base_url="https://repo.example.com/")
    assert settings.public_url == "https://repo.example.com"


def test_settings_from_env(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("SYOS_REPO_DIR", str(tmp_path / "repo"))
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("HOST", "127.0.0.1")
    monkeypatch.setenv("SYOS_REPO_BASE_URL", "https://packages.example.org")
    monkeypatch.setenv("SYOS_REPO_LOG_LEVEL", "debug")

    settings = RepositorySettings.from_env()

    assert settings.repo_root == Path(tmp_path / "repo")
    assert settings.port == 8080
    assert settings.host == "127.0.0.1"
    assert settings.public_url == "https://packages.example.org"
    assert settings.log_level == "debug"


def test_settings_from_env_rejects_bad_port(monkeypatch) -> None:
    monkeypatch.setenv("PORT", "not-a-port")
    with pytest.raises(ValidationError):
        RepositorySettings.from_env()
