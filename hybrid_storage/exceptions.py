"""The module that contains the exceptions for the storage router."""


class HybridStorageError(Exception):
    """Base exception for everything raised by `hybrid_storage`."""

    pass


class MissingConfiguration(HybridStorageError):
    """Required configuration is missing. Raised at startup only."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"Missing required configuration: {', '.join(missing)}")


class MalformedUpload(HybridStorageError):
    """The upload handed to the router is not well-formed."""

    pass


class ClassificationError(HybridStorageError):
    """The placement of a file could not be decided.

    `classify` is total, so this is not raised in practice.
    """

    pass


class UploadFailed(HybridStorageError):
    """The object store rejected the write."""

    pass


class EncodingFailed(HybridStorageError):
    """The bytes could not be encoded into an inline data URI."""

    pass


class SignedUrlGenerationFailed(HybridStorageError):
    """A signed URL could not be minted for a private object."""

    pass


class DeleteBackingFailed(HybridStorageError):
    """The object store refused to delete an object."""

    pass
