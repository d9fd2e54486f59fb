"""The `hybrid_storage` service: places uploaded files in an object store or inline in the database."""

from .enums import FileCategory, StorageClass, StorageReason
from .router import StorageRouter
from .strategy import StoragePolicy, StorageStrategy, classify
from .types_ import BatchStoreResult, FileDescriptor, UploadedFile, UploadMetadata

__all__ = [
    "StorageRouter",
    "StoragePolicy",
    "StorageStrategy",
    "classify",
    "StorageClass",
    "StorageReason",
    "FileCategory",
    "FileDescriptor",
    "UploadedFile",
    "UploadMetadata",
    "BatchStoreResult",
]
