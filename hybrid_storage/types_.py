"""The types (objects) passed into and returned by the `StorageRouter`. Decoupled from the ORM and the HTTP layer."""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import FileCategory, StorageClass


class HybridStorageBaseModel(BaseModel):
    """The base model for all the types in `hybrid_storage`."""

    model_config = ConfigDict(frozen=True)


class UploadedFile(HybridStorageBaseModel):
    """A file handed over by the multipart parser.

    `mime_type` is the declared (client-supplied) value, not sniffed from the content.
    """

    content: bytes = Field(repr=False)
    mime_type: str = Field(min_length=1)
    original_name: str = Field(min_length=1, max_length=255)
    byte_size: int = Field(ge=0)

    @model_validator(mode="after")
    def _check_byte_size(self) -> "UploadedFile":
        if self.byte_size != len(self.content):
            raise ValueError(f"byte_size ({self.byte_size}) does not match the content length ({len(self.content)})")
        return self

    @classmethod
    def from_bytes(cls, content: bytes, mime_type: str, original_name: str) -> "UploadedFile":
        """Build an `UploadedFile` whose size is taken from the content itself."""
        return cls(content=content, mime_type=mime_type, original_name=original_name, byte_size=len(content))


class UploadMetadata(HybridStorageBaseModel):
    """Optional metadata attached to an upload."""

    uploaded_by: str | None = Field(default=None, max_length=100)
    category: FileCategory | None = None


class FileDescriptor(HybridStorageBaseModel):
    """Where and how the bytes of one file are stored.

    For `StorageClass.OBJECT_STORE` the `locator` is the object key and `url` the stable (public) object URL.
    For `StorageClass.INLINE_DB` both hold the same `data:<mime>;base64,<payload>` URI.
    """

    file_name: str
    original_name: str
    storage_class: StorageClass
    locator: str = Field(repr=False)
    url: str = Field(repr=False)
    mime_type: str
    byte_size: int
    category: FileCategory
    uploaded_by: str | None = None
    is_public: bool = False


class BatchStoreError(HybridStorageBaseModel):
    """One file of a batch that could not be stored."""

    original_name: str
    error: str


class BatchStoreResult(HybridStorageBaseModel):
    """The outcome of storing several independent files."""

    descriptors: list[FileDescriptor] = []
    errors: list[BatchStoreError] = []


class StorageStats(HybridStorageBaseModel):
    """Counts and sizes of files per storage class."""

    total_files: int = 0
    total_size: int = 0

    object_store_files: int = 0
    object_store_size: int = 0

    inline_files: int = 0
    inline_size: int = 0
