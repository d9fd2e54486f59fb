"""The Schemas used by the `hybrid_storage` API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from ..enums import FileCategory, StorageClass
from ..types_ import BatchStoreError


class FileInfo(BaseModel):
    """File info response model. Never carries the inline payload."""

    id: UUID
    file_name: str
    original_name: str
    mime_type: str
    file_size: int
    size_formatted: str
    category: FileCategory
    storage_type: StorageClass
    is_public: bool
    download_count: int
    uploaded_by: str | None
    tags: list[str]
    date_added: datetime


class FileList(BaseModel):
    """File list response model."""

    total: int
    page: int
    pages: int
    limit: int
    files: list[FileInfo]


class MultipleUploadResult(BaseModel):
    """Response model for a multi-file upload."""

    files: list[FileInfo]
    errors: list[BatchStoreError]


class DownloadUrl(BaseModel):
    """A URL the file can be fetched from: a data URI, the public URL or a signed URL."""

    url: str
    storage_type: StorageClass
    expires_in: int | None = None


class Visibility(BaseModel):
    """The visibility of a file after toggling it."""

    id: UUID
    is_public: bool


class DeletionResult(BaseModel):
    """The outcome of deleting a file."""

    id: UUID
    backing_deleted: bool
