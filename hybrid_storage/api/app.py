"""The API server exposing the hybrid file storage."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from tortoise.contrib.fastapi import RegisterTortoise

from ..exceptions import (
    EncodingFailed,
    HybridStorageError,
    MalformedUpload,
    SignedUrlGenerationFailed,
    UploadFailed,
)
from ..router import StorageRouter
from ..routes.files import router as files_router
from ..settings import Settings
from ..toolkit.loguru_logging import configure_logging, logger
from ..toolkit.object_storage import BaseObjectStorageService, R2Service
from ..toolkit.tortoise_orm import get_tortoise_config

ERROR_STATUS_CODES: dict[type[HybridStorageError], int] = {
    MalformedUpload: 400,
    EncodingFailed: 422,
    UploadFailed: 502,
    SignedUrlGenerationFailed: 503,
}


async def handle_storage_error(request: Request, exc: HybridStorageError) -> JSONResponse:
    """Map the storage errors to HTTP responses."""
    status_code = next(
        (code for error_type, code in ERROR_STATUS_CODES.items() if isinstance(exc, error_type)),
        500,
    )
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc!r}")

    return JSONResponse(status_code=status_code, content={"success": False, "detail": str(exc)})


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Check the bucket and start the Tortoise ORM."""
    storage_router: StorageRouter = app.state.storage_router
    if not await storage_router.object_storage.check_connection():
        logger.warning("The object store is not reachable. Uploads to it will fail until it is.")

    async with RegisterTortoise(app, config=get_tortoise_config(app.state.settings), generate_schemas=True):
        yield


def create_app(settings: Settings, object_storage: BaseObjectStorageService | None = None) -> FastAPI:
    """Create the API app.

    :param settings: the settings, read once at process start
    :param object_storage: the object storage backend; built from `settings` when not given
    :raises MissingConfiguration: if the object store credentials are not set

    """
    configure_logging(settings)

    if object_storage is None:
        settings.validate_object_store()
        object_storage = R2Service.from_settings(settings)

    app = FastAPI(
        title="Hybrid Storage API",
        description="Stores uploaded files either in Cloudflare R2 or inline in the database.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.storage_router = StorageRouter(settings.storage_policy(), object_storage)

    app.add_exception_handler(HybridStorageError, handle_storage_error)
    app.include_router(files_router)

    @app.get("/healthz", tags=["health"])
    async def healthz():
        """Service health."""
        return {"ok": True}

    return app
