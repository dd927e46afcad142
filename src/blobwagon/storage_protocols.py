from dataclasses import dataclass
from datetime import datetime
from typing import Any, BinaryIO, Iterator, Protocol


@dataclass(frozen=True)
class BlobItem:
    """An entry returned by a container listing."""

    name: str
    is_prefix: bool = False  # directory / collection marker


class BlobHandle(Protocol):
    """Represents a single blob in storage."""

    def exists(self) -> bool:
        """Return True if the blob exists."""
        ...

    def get_last_modified(self) -> datetime:
        """Return the blob's last-modified time (timezone aware)."""
        ...

    def download_to(self, stream: BinaryIO) -> None:
        """Write the blob contents into a writable binary stream."""
        ...

    def upload(self, stream: BinaryIO, overwrite: bool = True) -> None:
        """Upload from a readable binary stream of unknown length."""
        ...


class ContainerHandle(Protocol):
    """Represents a container/bucket in storage."""

    def get_blob(self, blob_name: str) -> BlobHandle:
        """Return a handle to a blob."""
        ...

    def get_properties(self) -> dict[str, Any]:
        """Fetch container metadata; raises if the container is unreachable."""
        ...

    def list_blobs(self, prefix: str = "") -> Iterator[BlobItem]:
        """Iterate over the entries of the container."""
        ...


class StorageAdapter(Protocol):
    """Protocol for a storage backend adapter."""

    def get_container(self, container_name: str) -> ContainerHandle:
        """Return a handle to a container."""
        ...

    def close(self) -> None:
        """Close any resources/connections."""
        ...
