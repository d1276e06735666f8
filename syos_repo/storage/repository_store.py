from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import BinaryIO

from pydantic import ValidationError

from syos_repo.core.config import RepositorySettings
from syos_repo.core.errors import CorruptState, IOFailure, NotFound
from syos_repo.domain.models import (
    ArtifactRef,
    RepositoryManifest,
    RepositoryMetadata,
    ResolvedArtifact,
    iso_timestamp,
)

logger = logging.getLogger(__name__)


class RepositoryStore:
    """
    Sole access point to the on-disk repository state.

    Layout:
        <repo_root>/manifest.json
        <repo_root>/packages/<packageName>/<filename>

    All operations except ``initialize`` are read-only and safe to call
    concurrently from several in-flight requests.
    """

    def __init__(self, settings: RepositorySettings):
        self._settings = settings
        self._repo_root = settings.repo_root
        self._artifact_root = settings.artifact_root
        self._manifest_path = settings.manifest_path

    @property
    def repo_root(self) -> Path:
        return self._repo_root

    @property
    def artifact_root(self) -> Path:
        return self._artifact_root

    @property
    def manifest_path(self) -> Path:
        return self._manifest_path

    def default_manifest(self) -> RepositoryManifest:
        """The manifest written when bootstrapping an empty repository."""
        s = self._settings
        return RepositoryManifest(
            repository=RepositoryMetadata(
                name=s.repository_name,
                version=s.repository_version,
                url=s.public_url,
                description=s.repository_description,
                maintainer=s.repository_maintainer,
            ),
            packages=[],
            last_updated=iso_timestamp(),
        )

    def initialize(self) -> None:
        """
        Ensure the directory tree and a manifest exist.

        Idempotent: an existing manifest is left untouched, even when it is
        corrupt, so operator data is never discarded.
        """
        for directory in (self._repo_root, self._artifact_root):
            directory.mkdir(parents=True, exist_ok=True)

        if self._manifest_path.exists():
            logger.debug("Manifest already present at %s", self._manifest_path)
            return

        manifest = self.default_manifest()
        self._write_manifest(manifest)
        logger.info("Created default manifest at %s", self._manifest_path)

    def read_catalog(self) -> RepositoryManifest:
        """
        Read and parse manifest.json from disk.

        The file is read on every call; no copy is cached in memory.
        """
        try:
            text = self._manifest_path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise NotFound("Repository manifest not found") from exc
        except OSError as exc:
            logger.error("Failed to read manifest %s: %s", self._manifest_path, exc)
            raise IOFailure("Repository manifest could not be read") from exc
        except UnicodeDecodeError as exc:
            logger.error("Manifest %s is not valid UTF-8: %s", self._manifest_path, exc)
            raise CorruptState("Repository manifest is malformed") from exc

        try:
            raw = json.loads(text)
            return RepositoryManifest.model_validate(raw)
        except (json.JSONDecodeError, ValidationError) as exc:
            logger.error("Manifest %s is malformed: %s", self._manifest_path, exc)
            raise CorruptState("Repository manifest is malformed") from exc

    def resolve_artifact(self, package_name: str, filename: str) -> ResolvedArtifact:
        """
        Validate a download request and locate the artifact file.

        Validation happens before any filesystem access; unsafe segments raise
        InvalidRequest, a missing file raises NotFound.
        """
        ref = ArtifactRef.parse(package_name, filename)
        path = ref.storage_path(self._artifact_root)

        try:
            exists = path.is_file()
        except OSError as exc:
            logger.error("Failed to stat artifact %s: %s", path, exc)
            raise IOFailure("Artifact could not be accessed") from exc

        if not exists:
            logger.debug("Artifact not found: %s", path)
            raise NotFound("File not found")

        return ResolvedArtifact(ref=ref, path=path, content_kind=ref.content_kind)

    def open_artifact(self, artifact: ResolvedArtifact) -> BinaryIO:
        """
        Open a resolved artifact for reading.

        The file may be removed by an external publisher between resolution
        and download; that surfaces as NotFound rather than a server error.
        The returned handle stays readable even if the file is unlinked later.
        """
        try:
            return artifact.path.open("rb")
        except (FileNotFoundError, IsADirectoryError) as exc:
            logger.debug("Artifact vanished before download: %s", artifact.path)
            raise NotFound("File not found") from exc
        except OSError as exc:
            logger.error("Failed to open artifact %s: %s", artifact.path, exc)
            raise IOFailure("Artifact could not be accessed") from exc

    def _write_manifest(self, manifest: RepositoryManifest) -> None:
        # Write to a sibling first so readers never observe a half-written file.
        tmp_path = self._manifest_path.with_suffix(self._manifest_path.suffix + ".tmp")
        try:
            tmp_path.write_text(manifest.model_dump_json(indent=2, by_alias=True), encoding="utf-8")
            os.replace(tmp_path, self._manifest_path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise
