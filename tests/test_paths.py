from __future__ import annotations

from pathlib import Path

import pytest

from syos_repo.core.errors import InvalidRequest
from syos_repo.domain.models import ArtifactRef, ContentKind
from syos_repo.storage.paths import MAX_SEGMENT_BYTES, safe_join, validate_segment

UNSAFE_SEGMENTS = [
    "",
    ".",
    "..",
    "../etc",
    "a/b",
    "/etc",
    "a\\b",
    "..\\secret",
    "C:\\Windows",
    "nul\x00byte",
    "tool..syos",
    "a" * (MAX_SEGMENT_BYTES + 1),
    "\u00e9" * 128,
]


@pytest.mark.parametrize("segment", UNSAFE_SEGMENTS)
def test_validate_segment_rejects_unsafe_input(segment) -> None:
    with pytest.raises(InvalidRequest):
        validate_segment(segment, "filename")


@pytest.mark.parametrize("segment", ["pkg-a", "tool.syos", "v1.2.3_x86-64", ".hidden", "a" * MAX_SEGMENT_BYTES])
def test_validate_segment_accepts_plain_names(segment) -> None:
    assert validate_segment(segment, "filename") == segment


def test_safe_join_builds_path_below_root(tmp_path) -> None:
    assert safe_join(tmp_path, "pkg-a", "tool.syos") == tmp_path / "pkg-a" / "tool.syos"


def test_safe_join_does_not_normalize_traversal(tmp_path) -> None:
    with pytest.raises(InvalidRequest):
        safe_join(tmp_path, "pkg-a", "..", "manifest.json")


def test_artifact_ref_rejects_unsafe_segments() -> None:
    with pytest.raises(InvalidRequest):
        ArtifactRef.parse("..", "tool.syos")
    with pytest.raises(InvalidRequest):
        ArtifactRef(package_name="pkg-a", filename="x/../../y")


def test_artifact_ref_storage_path_and_kind() -> None:
    ref = ArtifactRef.parse("pkg-a", "tool.syos")
    root = Path("/srv/repository/packages")

    assert ref.storage_path(root) == root / "pkg-a" / "tool.syos"
    assert ref.content_kind is ContentKind.BINARY


@pytest.mark.parametrize(
    ("filename", "kind"),
    [
        ("tool.syos", ContentKind.BINARY),
        ("TOOL.SYOS", ContentKind.BINARY),
        ("tool.syfo", ContentKind.MANIFEST_FRAGMENT),
        ("README.md", ContentKind.UNKNOWN),
        ("noextension", ContentKind.UNKNOWN),
        (".syos", ContentKind.BINARY),
        (".SYFO", ContentKind.MANIFEST_FRAGMENT),
        ("tool.syos.txt", ContentKind.UNKNOWN),
    ],
)
def test_content_kind_from_filename(filename, kind) -> None:
    assert ContentKind.from_filename(filename) is kind
