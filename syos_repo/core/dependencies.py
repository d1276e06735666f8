from __future__ import annotations

from fastapi import Request

from syos_repo.services.repository_service import RepositoryService


def get_repository_service(request: Request) -> RepositoryService:
    """
    Return the service built by ``create_app`` for this application.
    """
    return request.app.state.repository_service
