"""Storage Services Module. Responsible for talking to the object storage backends."""

from ._base_storage_service import BaseObjectStorageService
from .r2_service import R2Service

__all__ = ["BaseObjectStorageService", "R2Service"]
