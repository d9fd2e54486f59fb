"""API routes for file handling."""

import math
from uuid import UUID

from fastapi import APIRouter, Depends, File as FastAPIFile, Form, HTTPException, Request, UploadFile
from fastapi.responses import RedirectResponse, Response
from pydantic import ValidationError

from ..api.schemas import DeletionResult, DownloadUrl, FileInfo, FileList, MultipleUploadResult, Visibility
from ..enums import FileCategory, StorageClass
from ..exceptions import MalformedUpload
from ..models import File
from ..router import StorageRouter, decode_data_uri
from ..settings import Settings
from ..toolkit.loguru_logging import logger
from ..types_ import BatchStoreError, StorageStats, UploadedFile, UploadMetadata

router = APIRouter(prefix="/api/files", tags=["files"])

DEFAULT_MIME_TYPE = "application/octet-stream"


# Dependencies
def get_storage_router(request: Request) -> StorageRouter:
    """Get the `StorageRouter` created at startup."""
    return request.app.state.storage_router


def get_settings(request: Request) -> Settings:
    """Get the settings the app was created with."""
    return request.app.state.settings


async def get_active_file(file_id: UUID) -> File:
    """Get an active file or fail with 404."""
    if not (file := await File.get_or_none(id=file_id, is_active=True)):
        raise HTTPException(status_code=404, detail="File not found")
    return file


def _file_info(file: File) -> FileInfo:
    return FileInfo(
        id=file.id,
        file_name=file.file_name,
        original_name=file.original_name,
        mime_type=file.mime_type,
        file_size=file.file_size,
        size_formatted=file.size_formatted,
        category=file.category,
        storage_type=file.storage_type,
        is_public=file.is_public,
        download_count=file.download_count,
        uploaded_by=file.uploaded_by,
        tags=file.tags,
        date_added=file.date_added,
    )


async def _read_upload(file: UploadFile) -> UploadedFile:
    """Turn a multipart part into an `UploadedFile`, rejecting malformed ones."""
    content = await file.read()
    await file.close()
    try:
        return UploadedFile.from_bytes(
            content,
            mime_type=file.content_type or DEFAULT_MIME_TYPE,
            original_name=file.filename or "",
        )
    except ValidationError as e:
        raise MalformedUpload(f"Malformed upload {file.filename!r}: {e.errors()[0]['msg']}") from e


def _metadata(uploaded_by: str | None, category: FileCategory | None) -> UploadMetadata:
    try:
        return UploadMetadata(uploaded_by=uploaded_by, category=category)
    except ValidationError as e:
        raise MalformedUpload(f"Malformed upload metadata: {e.errors()[0]['msg']}") from e


@router.post("/upload", response_model=FileInfo, status_code=201)
async def upload_file(
    file: UploadFile = FastAPIFile(...),
    uploaded_by: str | None = Form(None),
    category: FileCategory | None = Form(None),
    is_public: bool = Form(False),
    storage_router: StorageRouter = Depends(get_storage_router),
):
    """Upload a single file."""
    upload = await _read_upload(file)
    descriptor = await storage_router.store(upload, _metadata(uploaded_by, category), is_public=is_public)

    db_file = await File.from_descriptor(descriptor)
    logger.info(f"File {db_file.id} stored as {db_file.storage_type.value}")
    return _file_info(db_file)


@router.post("/upload-multiple", response_model=MultipleUploadResult, status_code=201)
async def upload_multiple_files(
    files: list[UploadFile] = FastAPIFile(...),
    uploaded_by: str | None = Form(None),
    category: FileCategory | None = Form(None),
    is_public: bool = Form(False),
    storage_router: StorageRouter = Depends(get_storage_router),
    settings: Settings = Depends(get_settings),
):
    """Upload several files. The files that fail are reported in `errors`, the rest are stored."""
    if len(files) > settings.MAX_FILES_PER_REQUEST:
        raise HTTPException(status_code=400, detail=f"At most {settings.MAX_FILES_PER_REQUEST} files per request")

    metadata = _metadata(uploaded_by, category)

    uploads: list[UploadedFile] = []
    rejected: list[BatchStoreError] = []
    for file in files:
        try:
            uploads.append(await _read_upload(file))
        except MalformedUpload as e:
            logger.warning(str(e))
            rejected.append(BatchStoreError(original_name=file.filename or "", error=str(e)))

    result = await storage_router.store_many(uploads, metadata, is_public=is_public)

    db_files = [await File.from_descriptor(descriptor) for descriptor in result.descriptors]
    return MultipleUploadResult(files=[_file_info(db_file) for db_file in db_files], errors=rejected + result.errors)


@router.get("", response_model=FileList)
async def list_files(
    page: int = 1,
    limit: int = 10,
    category: FileCategory | None = None,
    storage_type: StorageClass | None = None,
):
    """List active files with pagination."""
    if page < 1:
        raise HTTPException(status_code=400, detail="Page must be >= 1")
    if limit < 1 or limit > 100:
        raise HTTPException(status_code=400, detail="Limit must be between 1 and 100")

    query = File.filter(is_active=True)
    if category:
        query = query.filter(category=category)
    if storage_type:
        query = query.filter(storage_type=storage_type)

    total = await query.count()
    files = await query.offset((page - 1) * limit).limit(limit)

    return FileList(
        total=total,
        page=page,
        pages=math.ceil(total / limit),
        limit=limit,
        files=[_file_info(file) for file in files],
    )


@router.get("/stats", response_model=StorageStats)
async def get_storage_stats(storage_router: StorageRouter = Depends(get_storage_router)):
    """Get storage statistics per storage class."""
    entries = await File.filter(is_active=True).values_list("storage_type", "file_size")
    return storage_router.storage_stats(entries)


@router.get("/{file_id}", response_model=FileInfo)
async def get_file(file: File = Depends(get_active_file)):
    """Get file info."""
    return _file_info(file)


@router.get("/{file_id}/download", response_model=DownloadUrl)
async def get_download_url(
    file: File = Depends(get_active_file),
    storage_router: StorageRouter = Depends(get_storage_router),
):
    """Resolve a URL the file can be downloaded from."""
    descriptor = file.to_descriptor()
    url = await storage_router.resolve_download(descriptor)
    await file.increment_download_count()

    is_signed = descriptor.storage_class is StorageClass.OBJECT_STORE and not descriptor.is_public
    return DownloadUrl(
        url=url,
        storage_type=descriptor.storage_class,
        expires_in=storage_router.policy.signed_url_expires_in if is_signed else None,
    )


@router.get("/{file_id}/content")
async def get_file_content(
    file: File = Depends(get_active_file),
    storage_router: StorageRouter = Depends(get_storage_router),
):
    """Serve the file: inline files directly, object store files by redirect."""
    descriptor = file.to_descriptor()
    url = await storage_router.resolve_download(descriptor)
    await file.increment_download_count()

    if descriptor.storage_class is StorageClass.OBJECT_STORE:
        return RedirectResponse(url, status_code=307)

    mime_type, content = decode_data_uri(url)
    return Response(
        content=content,
        media_type=mime_type,
        headers={"Content-Disposition": f'attachment; filename="{descriptor.file_name}"'},
    )


@router.patch("/{file_id}/visibility", response_model=Visibility)
async def toggle_visibility(file: File = Depends(get_active_file)):
    """Make a public file private and vice versa."""
    return Visibility(id=file.id, is_public=await file.toggle_public())


@router.delete("/{file_id}", response_model=DeletionResult)
async def delete_file(
    file: File = Depends(get_active_file),
    storage_router: StorageRouter = Depends(get_storage_router),
):
    """Delete a file. The record is deactivated even if the backing object could not be removed."""
    await file.deactivate()

    backing_deleted = await storage_router.delete_backing(file.to_descriptor())
    if not backing_deleted:
        logger.warning(f"Backing object of file {file.id} was left behind")

    return DeletionResult(id=file.id, backing_deleted=backing_deleted)
