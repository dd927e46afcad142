import logging
from datetime import datetime
from typing import Any, BinaryIO, Iterator

from azure.core.exceptions import AzureError
from azure.core.exceptions import ResourceNotFoundError as AzureResourceNotFoundError
from azure.storage.blob import BlobServiceClient

from .errors import BlobNotFoundError, StorageError
from .storage_protocols import (
    BlobHandle,
    BlobItem,
    ContainerHandle,
    StorageAdapter,
)

log = logging.getLogger(__name__)

# Metadata flag set on directory placeholder blobs of hierarchical-namespace accounts
FOLDER_METADATA_KEY = "hdi_isfolder"


class AzureBlobAdapter(StorageAdapter):
    """Azure Blob Storage adapter for BlobRepository."""

    def __init__(self, blob_service_client: BlobServiceClient):
        """
        Create an adapter from an existing BlobServiceClient.
        This allows custom authentication and configuration.
        """
        self._client = blob_service_client

    @classmethod
    def from_connection_string(cls, connection_string: str) -> "AzureBlobAdapter":
        """
        Convenience builder: create adapter from a connection string.
        """
        try:
            client = BlobServiceClient.from_connection_string(connection_string)
        except ValueError as e:
            raise StorageError("Connection string is malformed") from e
        return cls(client)

    def get_container(self, container_name: str) -> ContainerHandle:
        return _AzureContainerHandle(self._client.get_container_client(container_name))

    def close(self) -> None:
        self._client.close()


class _AzureContainerHandle(ContainerHandle):
    def __init__(self, container_client):
        self._container_client = container_client

    def get_blob(self, blob_name: str) -> BlobHandle:
        return _AzureBlobHandle(self._container_client.get_blob_client(blob_name))

    def get_properties(self) -> dict[str, Any]:
        name = self._container_client.container_name
        try:
            props = self._container_client.get_container_properties()
        except AzureResourceNotFoundError as e:
            raise BlobNotFoundError(f"Container '{name}' not found") from e
        except AzureError as e:
            raise StorageError(f"Could not fetch properties of container '{name}'") from e
        return {
            "name": props.name,
            "last_modified": props.last_modified,
            "etag": props.etag,
            "metadata": dict(props.metadata or {}),
        }

    def list_blobs(self, prefix: str = "") -> Iterator[BlobItem]:
        try:
            for blob in self._container_client.list_blobs(
                name_starts_with=prefix or None, include=["metadata"]
            ):
                metadata = blob.metadata or {}
                is_folder = metadata.get(FOLDER_METADATA_KEY, "").lower() == "true"
                yield BlobItem(name=blob.name, is_prefix=is_folder)
        except AzureError as e:
            raise StorageError(
                f"Could not list container '{self._container_client.container_name}'"
            ) from e


class _AzureBlobHandle(BlobHandle):
    def __init__(self, blob_client):
        self._blob_client = blob_client

    def exists(self) -> bool:
        try:
            return self._blob_client.exists()
        except AzureError as e:
            raise StorageError(
                f"Could not check blob '{self._blob_client.blob_name}'"
            ) from e

    def get_last_modified(self) -> datetime:
        try:
            props = self._blob_client.get_blob_properties()
        except AzureResourceNotFoundError as e:
            raise BlobNotFoundError(
                f"Blob '{self._blob_client.blob_name}' not found"
            ) from e
        except AzureError as e:
            raise StorageError(
                f"Could not fetch properties of blob '{self._blob_client.blob_name}'"
            ) from e
        return props.last_modified

    def download_to(self, stream: BinaryIO) -> None:
        try:
            downloader = self._blob_client.download_blob()
            downloader.readinto(stream)
        except AzureResourceNotFoundError as e:
            raise BlobNotFoundError(
                f"Blob '{self._blob_client.blob_name}' not found"
            ) from e
        except AzureError as e:
            raise StorageError(
                f"Could not download blob '{self._blob_client.blob_name}'"
            ) from e

    def upload(self, stream: BinaryIO, overwrite: bool = True) -> None:
        """Note: length is left unset so the SDK streams the data in blocks."""
        log.debug("Streaming upload to blob %s", self._blob_client.blob_name)
        try:
            self._blob_client.upload_blob(stream, overwrite=overwrite)
        except AzureError as e:
            raise StorageError(
                f"Could not upload blob '{self._blob_client.blob_name}'"
            ) from e
