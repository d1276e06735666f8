from __future__ import annotations

import logging
import mimetypes
import os
from typing import BinaryIO, Dict, Iterator
from urllib.parse import quote

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, StreamingResponse

from syos_repo.core.dependencies import get_repository_service
from syos_repo.domain.models import ContentKind, HealthStatus, RepositoryInfo
from syos_repo.services.repository_service import RepositoryService

logger = logging.getLogger(__name__)
router = APIRouter()

# ---------------------------------------------------------------------------
# 1. GET /
# ---------------------------------------------------------------------------


@router.get("/", response_model=RepositoryInfo)
async def get_information(service: RepositoryService = Depends(get_repository_service)) -> RepositoryInfo:
    """
    Repository information: name, version and known endpoints.
    """
    return service.get_info()


# ---------------------------------------------------------------------------
# 2. GET|HEAD /packages.json
# ---------------------------------------------------------------------------


@router.api_route("/packages.json", methods=["GET", "HEAD"])
def get_packages(service: RepositoryService = Depends(get_repository_service)) -> JSONResponse:
    """
    Full package catalog, read fresh from manifest.json on every call.
    """
    manifest = service.get_catalog()
    return JSONResponse(content=manifest.to_document())


# ---------------------------------------------------------------------------
# 3. GET|HEAD /packages/{package_name}/{filename}
# ---------------------------------------------------------------------------


CHUNK_SIZE = 64 * 1024


def _iter_file(handle: BinaryIO) -> Iterator[bytes]:
    with handle:
        for chunk in iter(lambda: handle.read(CHUNK_SIZE), b""):
            yield chunk


def _attachment_header(filename: str) -> str:
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'


@router.api_route("/packages/{package_name}/{filename}", methods=["GET", "HEAD"])
def download_artifact(
    package_name: str,
    filename: str,
    service: RepositoryService = Depends(get_repository_service),
) -> StreamingResponse:
    """
    Serve one artifact file. Binary packages are sent as attachments,
    manifest fragments as JSON.

    The file is opened before the response starts, so an artifact removed
    after resolution is reported as 404 instead of failing mid-response.
    """
    artifact = service.get_artifact(package_name, filename)
    handle = service.open_artifact(artifact)
    name = artifact.ref.filename

    headers: Dict[str, str] = {"Content-Length": str(os.fstat(handle.fileno()).st_size)}
    if artifact.content_kind is ContentKind.BINARY:
        media_type = "application/octet-stream"
        headers["Content-Disposition"] = _attachment_header(name)
    elif artifact.content_kind is ContentKind.MANIFEST_FRAGMENT:
        media_type = "application/json"
    else:
        media_type = mimetypes.guess_type(name)[0] or "text/plain"

    return StreamingResponse(_iter_file(handle), media_type=media_type, headers=headers)


# ---------------------------------------------------------------------------
# 4. GET /health
# ---------------------------------------------------------------------------


@router.get("/health", response_model=HealthStatus)
async def health(service: RepositoryService = Depends(get_repository_service)) -> HealthStatus:
    """
    Lightweight health check endpoint.
    """
    return service.get_health()
