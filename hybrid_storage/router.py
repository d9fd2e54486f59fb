"""
The `StorageRouter`: places each uploaded file either in the object store or inline in the database.

It also resolves download URLs and deletes backing objects, dispatching on the storage class recorded at upload
time. The router holds no mutable state: the policy is frozen and the object storage client is safe to share
between concurrent requests.
"""

import asyncio
import base64
import binascii
import typing

from .enums import StorageClass
from .exceptions import DeleteBackingFailed, EncodingFailed, HybridStorageError, MalformedUpload
from .naming import generate_unique_file_name, get_file_category
from .strategy import StoragePolicy, StorageStrategy, classify
from .toolkit.loguru_logging import logger
from .toolkit.object_storage import BaseObjectStorageService
from .types_ import BatchStoreError, BatchStoreResult, FileDescriptor, StorageStats, UploadedFile, UploadMetadata

DATA_URI_PREFIX = "data:"
DATA_URI_BASE64_MARKER = ";base64,"


def encode_data_uri(content: bytes, mime_type: str) -> str:
    """Wrap the bytes into a self-describing `data:<mime>;base64,<payload>` URI."""
    try:
        payload = base64.b64encode(content).decode("ascii")
    except (TypeError, ValueError) as e:
        raise EncodingFailed(f"Failed to encode the file as base64: {e}") from e

    return f"{DATA_URI_PREFIX}{mime_type}{DATA_URI_BASE64_MARKER}{payload}"


def decode_data_uri(data_uri: str) -> tuple[str, bytes]:
    """Get the MIME type and the bytes back from a data URI built by `encode_data_uri`."""
    if not data_uri.startswith(DATA_URI_PREFIX) or DATA_URI_BASE64_MARKER not in data_uri:
        raise EncodingFailed("Not a base64 data URI")

    mime_type, _, payload = data_uri[len(DATA_URI_PREFIX) :].partition(DATA_URI_BASE64_MARKER)
    try:
        return mime_type, base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise EncodingFailed(f"Corrupt base64 payload: {e}") from e


class StorageRouter:
    """Decides, executes and later resolves the placement of one file at a time."""

    def __init__(self, policy: StoragePolicy, object_storage: BaseObjectStorageService):
        """Initialize the router with a frozen policy and the object storage backend."""
        self.policy = policy
        self.object_storage = object_storage

    def classify(self, mime_type: str, byte_size: int) -> StorageStrategy:
        """Pre-flight the placement of a file. Does no I/O."""
        return classify(self.policy, mime_type, byte_size)

    async def store(
        self, upload: UploadedFile, metadata: UploadMetadata | None = None, *, is_public: bool = False
    ) -> FileDescriptor:
        """Store the file where `classify` says and return its descriptor.

        Nothing is returned if the upload fails, so a caller never persists a half-done upload.

        :raises MalformedUpload: if `upload` is not an `UploadedFile`
        :raises UploadFailed: if the object store rejected the write
        :raises EncodingFailed: if the bytes could not be inlined

        """
        if not isinstance(upload, UploadedFile):
            raise MalformedUpload(f"Expected an `UploadedFile`, got {type(upload).__name__}")

        metadata = metadata or UploadMetadata()
        category = metadata.category or get_file_category(upload.mime_type)
        strategy = self.classify(upload.mime_type, upload.byte_size)
        file_name = generate_unique_file_name(upload.original_name)

        logger.info(
            f"Storage strategy for {upload.original_name}: {strategy.storage_class.value} ({strategy.reason.value})"
        )

        if strategy.storage_class is StorageClass.OBJECT_STORE:
            await self.object_storage.upload_file(
                upload.content,
                file_name,
                content_type=upload.mime_type,
                metadata={
                    "originalName": upload.original_name,
                    "uploadedBy": metadata.uploaded_by or "anonymous",
                    "category": category.value,
                    "storageType": StorageClass.OBJECT_STORE.value,
                },
            )
            locator = file_name
            url = self.object_storage.public_url(file_name)
        else:
            locator = url = encode_data_uri(upload.content, upload.mime_type)

        return FileDescriptor(
            file_name=file_name,
            original_name=upload.original_name,
            storage_class=strategy.storage_class,
            locator=locator,
            url=url,
            mime_type=upload.mime_type,
            byte_size=upload.byte_size,
            category=category,
            uploaded_by=metadata.uploaded_by,
            is_public=is_public,
        )

    async def store_many(
        self,
        uploads: typing.Iterable[UploadedFile],
        metadata: UploadMetadata | None = None,
        *,
        is_public: bool = False,
    ) -> BatchStoreResult:
        """Store several files concurrently. A failing file is recorded and never aborts its siblings."""
        uploads = list(uploads)
        results = await asyncio.gather(
            *(self.store(upload, metadata, is_public=is_public) for upload in uploads),
            return_exceptions=True,
        )

        descriptors: list[FileDescriptor] = []
        errors: list[BatchStoreError] = []
        for upload, result in zip(uploads, results):
            if isinstance(result, HybridStorageError):
                logger.warning(f"Failed to store {upload.original_name}: {result}")
                errors.append(BatchStoreError(original_name=upload.original_name, error=str(result)))
            elif isinstance(result, BaseException):
                raise result
            else:
                descriptors.append(result)

        return BatchStoreResult(descriptors=descriptors, errors=errors)

    async def resolve_download(self, descriptor: FileDescriptor, is_public: bool | None = None) -> str:
        """Get a URL the file can be fetched from.

        Inline files resolve to their data URI. Object store files resolve to the stable URL when public and to a
        signed URL otherwise; a signing failure is raised, never downgraded to the public URL.

        :param descriptor: the stored descriptor
        :param is_public: overrides `descriptor.is_public`
        :raises SignedUrlGenerationFailed: if a signed URL was needed but could not be minted

        """
        if descriptor.storage_class is StorageClass.INLINE_DB:
            return descriptor.locator

        public = descriptor.is_public if is_public is None else is_public
        if public:
            return descriptor.url

        return await self.object_storage.generate_signed_url(descriptor.locator, self.policy.signed_url_expires_in)

    async def delete_backing(self, descriptor: FileDescriptor) -> bool:
        """Best-effort removal of the bytes behind a descriptor.

        Returns `False` instead of raising when the object store refuses: the owning record is deleted regardless.
        """
        if descriptor.storage_class is StorageClass.INLINE_DB:
            return True

        try:
            await self.object_storage.delete_file(descriptor.locator)
        except DeleteBackingFailed as e:
            logger.error(f"Error deleting {descriptor.locator} from the object store: {e}")
            return False
        except Exception as e:  # pylint: disable=broad-except
            # Backing cleanup never blocks the removal of the owning record
            logger.exception(f"Unexpected error deleting {descriptor.locator} from the object store: {e!r}")
            return False

        return True

    @staticmethod
    def storage_stats(entries: typing.Iterable[tuple[StorageClass | str, int]]) -> StorageStats:
        """Count files and bytes per storage class from `(storage class, byte size)` pairs."""
        counts = {StorageClass.OBJECT_STORE: 0, StorageClass.INLINE_DB: 0}
        sizes = {StorageClass.OBJECT_STORE: 0, StorageClass.INLINE_DB: 0}
        for storage_class, byte_size in entries:
            storage_class = StorageClass(storage_class)
            counts[storage_class] += 1
            sizes[storage_class] += byte_size or 0

        return StorageStats(
            total_files=sum(counts.values()),
            total_size=sum(sizes.values()),
            object_store_files=counts[StorageClass.OBJECT_STORE],
            object_store_size=sizes[StorageClass.OBJECT_STORE],
            inline_files=counts[StorageClass.INLINE_DB],
            inline_size=sizes[StorageClass.INLINE_DB],
        )
