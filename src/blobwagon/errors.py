class StorageError(Exception):
    """Raised by a storage backend when a call against it fails."""

    pass


class BlobNotFoundError(StorageError):
    """Raised when a requested blob or container does not exist."""

    pass


class WagonError(Exception):
    """Base class for errors surfaced to the repository host."""

    pass


class AuthenticationError(WagonError):
    """Raised when credentials are missing or the container cannot be reached."""

    pass


class ResourceNotFoundError(WagonError):
    """Raised when a resource is absent or could not be downloaded."""

    pass


class TransferFailedError(WagonError):
    """Raised when an upload, existence check or listing fails."""

    pass


class NotConnectedError(WagonError):
    """Raised when an operation runs before connect() or after disconnect()."""

    pass
