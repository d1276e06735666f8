"""
Transport-agnostic repository operations.

Each public method maps one request contract (info, catalog, artifact,
health) onto RepositoryStore calls and returns a model or raises a
RepositoryError subclass that the HTTP layer renders.
"""

from __future__ import annotations

import logging
import time
from typing import BinaryIO, Callable, Optional

from syos_repo import __version__
from syos_repo.core.errors import (
    CorruptState,
    InternalError,
    InvalidRequest,
    IOFailure,
    NotFound,
)
from syos_repo.domain.models import (
    HealthStatus,
    RepositoryInfo,
    RepositoryManifest,
    ResolvedArtifact,
    utc_now,
)
from syos_repo.storage.repository_store import RepositoryStore

logger = logging.getLogger(__name__)

SERVICE_NAME = "SystemOS Package Repository"
SERVICE_DESCRIPTION = "SystemOS package repository server"

ENDPOINTS = {
    "packages": "/packages.json",
    "download": "/packages/:packageName/:filename",
    "health": "/health",
}


class RepositoryService:
    def __init__(self, store: RepositoryStore, clock: Optional[Callable[[], float]] = None):
        self.store = store
        self._clock = clock or time.monotonic
        self._started_at = self._clock()

    def get_info(self) -> RepositoryInfo:
        return RepositoryInfo(
            name=SERVICE_NAME,
            version=__version__,
            description=SERVICE_DESCRIPTION,
            endpoints=dict(ENDPOINTS),
        )

    def get_catalog(self) -> RepositoryManifest:
        """
        Return the current catalog.

        A missing manifest degrades to the bootstrap default instead of
        failing; unreadable or malformed manifests become InternalError.
        """
        try:
            return self.store.read_catalog()
        except NotFound:
            logger.warning("Manifest missing at %s, serving default catalog", self.store.manifest_path)
            return self.store.default_manifest()
        except (CorruptState, IOFailure) as exc:
            raise InternalError("Failed to load package catalog") from exc

    def get_artifact(self, package_name: str, filename: str) -> ResolvedArtifact:
        """
        Resolve an artifact for download.

        InvalidRequest and NotFound reach the caller unchanged.
        """
        try:
            return self.store.resolve_artifact(package_name, filename)
        except (InvalidRequest, NotFound):
            raise
        except Exception as exc:
            logger.error("Unexpected failure resolving %r/%r: %s", package_name, filename, exc, exc_info=True)
            raise InternalError("Failed to access artifact") from exc

    def open_artifact(self, artifact: ResolvedArtifact) -> BinaryIO:
        """
        Open a resolved artifact for streaming. A file removed since
        resolution raises NotFound.
        """
        try:
            return self.store.open_artifact(artifact)
        except NotFound:
            raise
        except Exception as exc:
            logger.error("Unexpected failure opening %s: %s", artifact.ref.filename, exc, exc_info=True)
            raise InternalError("Failed to access artifact") from exc

    def get_health(self) -> HealthStatus:
        return HealthStatus(
            status="healthy",
            timestamp=utc_now(),
            uptime=max(0.0, self._clock() - self._started_at),
        )
