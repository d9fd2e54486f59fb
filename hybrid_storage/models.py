"""The ORM models used by `hybrid_storage`."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import PurePosixPath

from tortoise import fields
from tortoise.expressions import F
from tortoise.models import Model

from .enums import FileCategory, StorageClass
from .types_ import FileDescriptor


class File(Model):
    """An uploaded file. Owns exactly one `FileDescriptor`.

    `storage_type` and `locator` are written once, when the record is created from a descriptor. Records are
    soft-deleted (`is_active = False`) and never removed from the database.
    """

    id = fields.UUIDField(primary_key=True)

    file_name = fields.CharField(max_length=255, unique=True)
    original_name = fields.CharField(max_length=255)

    storage_type = fields.CharEnumField(StorageClass, max_length=16, db_index=True)
    locator = fields.TextField()  # the object key, or the data URI for inline files
    url = fields.TextField()

    mime_type = fields.CharField(max_length=127, db_index=True)
    file_size = fields.BigIntField()
    category = fields.CharEnumField(FileCategory, max_length=16, db_index=True)

    uploaded_by = fields.CharField(max_length=100, null=True, db_index=True)
    tags = fields.JSONField(default=list)

    is_public = fields.BooleanField(default=False)
    download_count = fields.IntField(default=0)

    date_added = fields.DatetimeField(auto_now_add=True)
    date_updated = fields.DatetimeField(auto_now=True)

    is_active = fields.BooleanField(default=True, db_index=True)
    date_deactivated = fields.DatetimeField(null=True)

    class Meta:  # pylint: disable=too-few-public-methods
        """Model metadata."""

        table = "files"
        ordering = ["-date_added"]

    def __str__(self) -> str:
        """String representation of the file."""
        return f"{self.original_name} ({self.id})"

    @classmethod
    async def from_descriptor(cls, descriptor: FileDescriptor, tags: list[str] | None = None) -> File:
        """Persist the descriptor returned by the `StorageRouter`."""
        return await cls.create(
            file_name=descriptor.file_name,
            original_name=descriptor.original_name,
            storage_type=descriptor.storage_class,
            locator=descriptor.locator,
            url=descriptor.url,
            mime_type=descriptor.mime_type,
            file_size=descriptor.byte_size,
            category=descriptor.category,
            uploaded_by=descriptor.uploaded_by,
            tags=tags or [],
            is_public=descriptor.is_public,
        )

    def to_descriptor(self) -> FileDescriptor:
        """Get the descriptor back, to hand it to the `StorageRouter`."""
        return FileDescriptor(
            file_name=self.file_name,
            original_name=self.original_name,
            storage_class=self.storage_type,
            locator=self.locator,
            url=self.url,
            mime_type=self.mime_type,
            byte_size=self.file_size,
            category=self.category,
            uploaded_by=self.uploaded_by,
            is_public=self.is_public,
        )

    async def deactivate(self) -> None:
        """Soft-delete the file."""
        self.is_active = False
        self.date_deactivated = datetime.now(timezone.utc)
        await self.save(update_fields=["is_active", "date_deactivated", "date_updated"])

    async def increment_download_count(self) -> None:
        """Count one more download. Atomic on the database side."""
        await File.filter(id=self.id).update(download_count=F("download_count") + 1)
        self.download_count += 1

    async def toggle_public(self) -> bool:
        """Flip the visibility of the file and return the new value."""
        self.is_public = not self.is_public
        await self.save(update_fields=["is_public", "date_updated"])
        return self.is_public

    @property
    def file_extension(self) -> str:
        """The lower-cased extension of the original name, without the dot."""
        return PurePosixPath(self.original_name).suffix[1:].lower()

    @property
    def size_formatted(self) -> str:
        """Get human-readable file size."""
        size = float(self.file_size)
        for unit in ["B", "KB", "MB", "GB"]:
            if size < 1024:
                return f"{size:.1f} {unit}"
            size /= 1024
        return f"{size:.1f} TB"
