"""
Runtime configuration for the repository server.

Settings are resolved once at startup (``RepositorySettings.from_env``) and
handed to the store and service explicitly. Nothing here is a module-level
singleton.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


REPO_DIR_ENV_VAR = "SYOS_REPO_DIR"
BASE_URL_ENV_VAR = "SYOS_REPO_BASE_URL"
LOG_LEVEL_ENV_VAR = "SYOS_REPO_LOG_LEVEL"
HOST_ENV_VAR = "HOST"
PORT_ENV_VAR = "PORT"

# Resolve the project root (not the Python package root)
_PROJECT_ROOT = Path(__file__).resolve().parents[2]
_DEFAULT_REPO_DIR = _PROJECT_ROOT / "repository"

MANIFEST_FILENAME = "manifest.json"
ARTIFACT_DIRNAME = "packages"


class RepositorySettings(BaseModel):
    """
    Process-wide repository configuration.

    ``repo_root`` and ``artifact_root`` are fixed for the lifetime of the
    process; the store never relocates them.
    """

    repo_root: Path = Field(
        default=_DEFAULT_REPO_DIR,
        description="Directory holding manifest.json and the packages/ tree.",
    )
    host: str = Field(default="0.0.0.0", description="Interface uvicorn binds to.")
    port: int = Field(default=3000, ge=1, le=65535, description="TCP port uvicorn listens on.")
    base_url: Optional[str] = Field(
        default=None,
        description="Public URL advertised in the default manifest. Defaults to http://localhost:<port>.",
    )
    log_level: str = Field(default="INFO", description="Root logging level.")

    # Metadata written into the bootstrap manifest
    repository_name: str = "SystemOS Official Repository"
    repository_version: str = "1.0.0"
    repository_description: str = "Official SystemOS package repository"
    repository_maintainer: Optional[str] = "SystemOS Development Team"

    @property
    def artifact_root(self) -> Path:
        return self.repo_root / ARTIFACT_DIRNAME

    @property
    def manifest_path(self) -> Path:
        return self.repo_root / MANIFEST_FILENAME

    @property
    def public_url(self) -> str:
        if self.base_url:
            return self.base_url.rstrip("/")
        return f"http://localhost:{self.port}"

    @classmethod
    def from_env(cls) -> "RepositorySettings":
        """
        Build settings from environment variables.

        Priority for every field:
        1. The corresponding environment variable
        2. The field default
        """
        values = {}

        repo_dir = os.environ.get(REPO_DIR_ENV_VAR)
        if repo_dir:
            values["repo_root"] = Path(repo_dir).expanduser()

        for env_var, field_name in (
            (HOST_ENV_VAR, "host"),
            (PORT_ENV_VAR, "port"),
            (BASE_URL_ENV_VAR, "base_url"),
            (LOG_LEVEL_ENV_VAR, "log_level"),
        ):
            value = os.environ.get(env_var)
            if value:
                values[field_name] = value

        return cls(**values)
