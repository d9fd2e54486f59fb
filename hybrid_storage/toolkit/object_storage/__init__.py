"""Object storage module: the backends behind `StorageClass.OBJECT_STORE`."""

from .storage_services import BaseObjectStorageService, R2Service

__all__ = ["BaseObjectStorageService", "R2Service"]
