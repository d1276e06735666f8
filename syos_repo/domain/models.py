"""
Pydantic models for the SystemOS package repository.

This module defines the data models used throughout the application:
- The catalog manifest persisted at <REPO_ROOT>/manifest.json
- Validated artifact references and resolution results
- Response payloads for the info, health and error contracts

All models use Pydantic for validation, serialization, and type safety.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from syos_repo.storage.paths import safe_join, validate_segment


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(moment: Optional[datetime] = None) -> str:
    """UTC timestamp in the millisecond "...T12:00:00.000Z" form package clients expect."""
    moment = (moment or utc_now()).astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ---------------------------------------------------------------------------
# Catalog Models
# ---------------------------------------------------------------------------


class RepositoryMetadata(BaseModel):
    """
    Descriptive metadata for the repository, shown to package-manager clients.
    """

    model_config = ConfigDict(extra="allow")

    name: str = Field(description="Human-friendly repository name.")
    version: str = Field(description="Repository format/content version.")
    url: str = Field(description="Base URL clients use to reach this repository.")
    description: str = Field(description="Longer description of the repository.")
    maintainer: Optional[str] = Field(
        default=None,
        description="Optional maintainer contact or team name.",
    )


class RepositoryManifest(BaseModel):
    """
    Root object of the package catalog.

    Package entries are opaque to the server: they are passed through verbatim
    and in stored order, never reordered or deduplicated. Unknown top-level
    keys are preserved as well.

    Persisted at: <REPO_ROOT>/manifest.json
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    repository: RepositoryMetadata
    packages: List[Any] = Field(default_factory=list)
    # Served exactly as stored; only the bootstrap write generates a value.
    last_updated: Optional[Any] = Field(
        default=None,
        alias="lastUpdated",
        serialization_alias="lastUpdated",
        description="Timestamp of the last (re)write of the manifest, kept verbatim.",
    )

    def to_document(self) -> Dict[str, Any]:
        """JSON-compatible dict using the on-disk key names."""
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Artifact Models
# ---------------------------------------------------------------------------


class ContentKind(str, Enum):
    """Purpose of an artifact, derived from its filename extension."""

    BINARY = "binary"
    MANIFEST_FRAGMENT = "manifest-fragment"
    UNKNOWN = "unknown"

    @classmethod
    def from_filename(cls, filename: str) -> "ContentKind":
        lowered = filename.lower()
        for extension, kind in _EXTENSION_KINDS.items():
            if lowered.endswith(extension):
                return kind
        return cls.UNKNOWN


BINARY_EXTENSION = ".syos"
MANIFEST_FRAGMENT_EXTENSION = ".syfo"

_EXTENSION_KINDS = {
    BINARY_EXTENSION: ContentKind.BINARY,
    MANIFEST_FRAGMENT_EXTENSION: ContentKind.MANIFEST_FRAGMENT,
}


class ArtifactRef(BaseModel):
    """
    A request for one artifact file whose segments passed path validation.

    Construction raises InvalidRequest for unsafe segments, so holding an
    ArtifactRef means both segments are safe to join.
    """

    model_config = ConfigDict(frozen=True)

    package_name: str
    filename: str

    @field_validator("package_name", "filename")
    @classmethod
    def _check_segment(cls, value: str, info: ValidationInfo) -> str:
        # InvalidRequest is not a ValueError, so it escapes pydantic unchanged.
        return validate_segment(value, info.field_name)

    @classmethod
    def parse(cls, package_name: str, filename: str) -> "ArtifactRef":
        return cls(package_name=package_name, filename=filename)

    @property
    def content_kind(self) -> ContentKind:
        return ContentKind.from_filename(self.filename)

    def storage_path(self, artifact_root: Path) -> Path:
        return safe_join(artifact_root, self.package_name, self.filename)


class ResolvedArtifact(BaseModel):
    """An artifact that exists on disk, ready to be streamed back."""

    model_config = ConfigDict(frozen=True)

    ref: ArtifactRef
    path: Path
    content_kind: ContentKind


# ---------------------------------------------------------------------------
# API Response Models
# ---------------------------------------------------------------------------


class RepositoryInfo(BaseModel):
    name: str
    version: str
    description: str
    endpoints: Dict[str, str]


class HealthStatus(BaseModel):
    status: str = "healthy"
    timestamp: datetime
    uptime: float = Field(description="Seconds since the service started.")


class ErrorResponse(BaseModel):
    """Structured error body. Never carries stack traces or filesystem paths."""

    error: str
    kind: str
