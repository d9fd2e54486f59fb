"""Helpers to name and categorize uploaded files."""

import re
import secrets
import string
import time
from pathlib import PurePosixPath, PureWindowsPath

from .enums import FileCategory

UNSAFE_CHARACTERS = re.compile(r"[^a-zA-Z0-9_-]")
BASE_NAME_MAX_LENGTH = 50
EXTENSION_MAX_LENGTH = 10

_RANDOM_ALPHABET = string.ascii_lowercase + string.digits


def _random_suffix(length: int = 13) -> str:
    return "".join(secrets.choice(_RANDOM_ALPHABET) for _ in range(length))


def split_original_name(original_name: str) -> tuple[str, str]:
    """Split a user-supplied name into a sanitized base name and extension (without the dot).

    Any directory part, including Windows-style ones, is dropped first.
    """
    name = PurePosixPath(PureWindowsPath(original_name).name).name
    path = PurePosixPath(name)

    extension = path.suffix[1:] if path.suffix else ""
    base_name = path.stem if extension else name

    sanitized_base_name = UNSAFE_CHARACTERS.sub("_", base_name)[:BASE_NAME_MAX_LENGTH] or "file"
    sanitized_extension = UNSAFE_CHARACTERS.sub("", extension)[:EXTENSION_MAX_LENGTH].lower()
    return sanitized_base_name, sanitized_extension


def generate_unique_file_name(original_name: str) -> str:
    """Generate a collision-resistant object key from the user-supplied name.

    Shape: `<sanitized base name>_<unix millis>_<random suffix>[.<extension>]`.
    """
    base_name, extension = split_original_name(original_name)
    file_name = f"{base_name}_{int(time.time() * 1000)}_{_random_suffix()}"
    return f"{file_name}.{extension}" if extension else file_name


def get_file_category(mime_type: str) -> FileCategory:
    """Get the coarse category of a file from its MIME type."""
    mime_type = mime_type.lower()

    if mime_type.startswith("image/"):
        return FileCategory.IMAGE
    if mime_type.startswith("video/"):
        return FileCategory.VIDEO
    if mime_type.startswith("audio/"):
        return FileCategory.AUDIO
    if mime_type == "application/pdf":
        return FileCategory.DOCUMENT
    if mime_type.startswith("text/"):
        return FileCategory.TEXT
    if any(kind in mime_type for kind in ("word", "excel", "powerpoint", "officedocument")):
        return FileCategory.OFFICE

    return FileCategory.OTHER
