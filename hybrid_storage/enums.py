"""Different enums used in the project."""

from enum import Enum


class StorageClass(str, Enum):
    """Where the bytes of a file live."""

    OBJECT_STORE = "r2"
    INLINE_DB = "inline"


class StorageReason(str, Enum):
    """Why a file was placed where it was. Diagnostic only."""

    PRIORITY_TYPE = "priority_type"
    LARGE_FILE = "large_file"
    LIGHT_FILE = "light_file"
    DEFAULT = "default"


class FileCategory(str, Enum):
    """Coarse file category derived from the MIME type."""

    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    DOCUMENT = "document"
    TEXT = "text"
    OFFICE = "office"
    OTHER = "other"

    def __str__(self):
        return self.value
