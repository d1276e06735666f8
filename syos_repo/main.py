import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from syos_repo import __version__
from syos_repo.api.repository import router as repository_router
from syos_repo.core.config import RepositorySettings
from syos_repo.core.errors import InternalError, InvalidRequest, NotFound, RepositoryError
from syos_repo.domain.models import ErrorResponse
from syos_repo.services.repository_service import RepositoryService
from syos_repo.storage.repository_store import RepositoryStore

logger = logging.getLogger(__name__)

_STATUS_BY_KIND = {
    InvalidRequest.kind: 400,
    NotFound.kind: 404,
    InternalError.kind: 500,
}

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
    "X-DNS-Prefetch-Control": "off",
}


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def _error_response(status_code: int, message: str, kind: str) -> JSONResponse:
    body = ErrorResponse(error=message, kind=kind)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def create_app(settings: Optional[RepositorySettings] = None) -> FastAPI:
    """
    Build the FastAPI application around one RepositoryStore/RepositoryService
    pair. Both are kept on ``app.state``; nothing is stored in module globals.
    """
    settings = settings or RepositorySettings.from_env()
    store = RepositoryStore(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Bootstrap runs to completion before the server accepts connections.
        store.initialize()
        logger.info("SystemOS Repository Server running on port %s", settings.port)
        logger.info("Repository path: %s", store.repo_root)
        logger.info("Packages list: %s/packages.json", settings.public_url)
        logger.info("Health check: %s/health", settings.public_url)
        yield

    app = FastAPI(
        title="SystemOS Package Repository",
        version=__version__,
        description="Serves the SystemOS package catalog and package artifacts.",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.repository_store = store
    app.state.repository_service = RepositoryService(store)

    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "HEAD", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        client = request.client.host if request.client else "-"
        logger.info("%s %s - %s", request.method, request.url.path, client)
        return await call_next(request)

    @app.exception_handler(RepositoryError)
    async def repository_error_handler(request: Request, exc: RepositoryError) -> JSONResponse:
        status_code = _STATUS_BY_KIND.get(exc.kind, 500)
        if status_code >= 500:
            logger.error("%s on %s: %s", exc.kind, request.url.path, exc.message, exc_info=exc)
            return _error_response(status_code, exc.message, InternalError.kind)
        logger.info("%s on %s: %s", exc.kind, request.url.path, exc.message)
        return _error_response(status_code, exc.message, exc.kind)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            return _error_response(404, "Endpoint not found", NotFound.kind)
        return _error_response(exc.status_code, str(exc.detail), "HTTPError")

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Server error on %s", request.url.path, exc_info=exc)
        return _error_response(500, "Internal server error", InternalError.kind)

    app.include_router(repository_router, tags=["repository"])
    return app


def run() -> None:
    """
    Console entry point: read settings from the environment and serve with uvicorn.

    Equivalent to `uvicorn --factory syos_repo.main:create_app`.
    """
    import uvicorn

    settings = RepositorySettings.from_env()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    """
    Allow running `python -m syos_repo.main` to start the server.
    """
    run()
