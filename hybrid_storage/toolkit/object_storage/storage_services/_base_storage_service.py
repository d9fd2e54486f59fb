"""The `BaseObjectStorageService` is an abstract class that defines the interface for an object storage service."""

from abc import ABC, abstractmethod


class BaseObjectStorageService(ABC):
    """Base class for object storage services.

    Implementations translate backend errors into `UploadFailed`, `SignedUrlGenerationFailed` and
    `DeleteBackingFailed`, so the router never has to know which backend it talks to.
    """

    @abstractmethod
    async def upload_file(
        self,
        content: bytes,
        object_key: str,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> None:
        """Uploads raw bytes under the given object key.

        :param content: the bytes to upload
        :param object_key: the generated, already sanitized object key
        :param content_type: MIME type stored along with the object
        :param metadata: small user metadata bag stored along with the object
        :raises UploadFailed: if the backend rejected the write

        """
        raise NotImplementedError

    @abstractmethod
    async def delete_file(self, object_key: str) -> None:
        """Deletes an object. A missing object is not an error.

        :raises DeleteBackingFailed: if the backend refused the deletion

        """
        raise NotImplementedError

    @abstractmethod
    async def generate_signed_url(self, object_key: str, expires_in: int) -> str:
        """Mints a time-bounded URL granting read access to a private object.

        :raises SignedUrlGenerationFailed: if the URL could not be minted

        """
        raise NotImplementedError

    @abstractmethod
    def public_url(self, object_key: str) -> str:
        """Returns the stable URL of an object. Does no I/O."""
        raise NotImplementedError

    async def check_connection(self) -> bool:
        """Checks that the backend is reachable."""
        return True
