"""
Placement rules: decide whether a file goes to the object store or is inlined into the database.

Everything here is pure. `classify` does no I/O, so it can be called before a single byte is transferred.
"""

from dataclasses import dataclass, field

from .enums import StorageClass, StorageReason

# Types that always go to the object store, whatever their size
DEFAULT_PRIORITY_TYPES = frozenset(
    {
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/vnd.ms-powerpoint",
        "application/vnd.openxmlformats-officedocument.presentationml.presentation",
        "application/zip",
        "application/x-rar-compressed",
        "application/x-7z-compressed",
    }
)

# Light types that may stay in the database
DEFAULT_INLINE_ELIGIBLE_TYPES = frozenset(
    {
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
        "image/svg+xml",
        "text/plain",
        "text/csv",
        "application/json",
    }
)


@dataclass(frozen=True)
class StoragePolicy:
    """The static configuration of the placement rules."""

    inline_max_bytes: int = 5 * 1024 * 1024
    object_store_min_bytes: int = 1 * 1024 * 1024
    priority_types: frozenset[str] = field(default=DEFAULT_PRIORITY_TYPES)
    inline_eligible_types: frozenset[str] = field(default=DEFAULT_INLINE_ELIGIBLE_TYPES)
    signed_url_expires_in: int = 3600


@dataclass(frozen=True)
class StorageStrategy:
    """The outcome of `classify`. Never persisted."""

    storage_class: StorageClass
    reason: StorageReason
    max_size: int | None = None  # `None` means no limit (object store)

    @property
    def is_inline(self) -> bool:
        """Whether the bytes will be inlined into the database."""
        return self.storage_class is StorageClass.INLINE_DB


def classify(policy: StoragePolicy, mime_type: str, byte_size: int) -> StorageStrategy:
    """Decide where a file of the given declared MIME type and size should live.

    The order of the checks matters: priority types win over any size rule, and the object store floor wins over
    inline eligibility. Anything not covered falls back to the object store, which has no size or type limits.
    """
    if mime_type in policy.priority_types:
        return StorageStrategy(StorageClass.OBJECT_STORE, StorageReason.PRIORITY_TYPE)

    if byte_size > policy.object_store_min_bytes:
        return StorageStrategy(StorageClass.OBJECT_STORE, StorageReason.LARGE_FILE)

    if mime_type in policy.inline_eligible_types and byte_size <= policy.inline_max_bytes:
        return StorageStrategy(StorageClass.INLINE_DB, StorageReason.LIGHT_FILE, max_size=policy.inline_max_bytes)

    return StorageStrategy(StorageClass.OBJECT_STORE, StorageReason.DEFAULT)
