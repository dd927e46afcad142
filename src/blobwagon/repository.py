import logging
from datetime import datetime
from pathlib import Path
from typing import Callable

from .azure_blob_adapter import AzureBlobAdapter
from .credentials import AuthenticationInfo, ConnectionStringFactory
from .errors import (
    AuthenticationError,
    NotConnectedError,
    ResourceNotFoundError,
    StorageError,
    TransferFailedError,
)
from .storage_protocols import ContainerHandle, StorageAdapter
from .transfer import ProgressReader, ProgressWriter, TransferProgress

log = logging.getLogger(__name__)

AdapterFactory = Callable[[str], StorageAdapter]


def _to_millis(value: int | float | datetime) -> float:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            raise ValueError("timestamp datetime must be timezone aware")
        return value.timestamp() * 1000
    return value


class BlobRepository:
    """
    Artifact repository backed by a single blob-storage container.

    Every call re-resolves the remote blob; nothing is cached or retried.
    Operations other than connect() raise NotConnectedError until a
    connection is established.
    """

    def __init__(
        self,
        storage_account: str | None,
        container: str,
        adapter_factory: AdapterFactory | None = None,
        connection_string_factory: ConnectionStringFactory | None = None,
        honor_list_prefix: bool = False,
    ) -> None:
        self.storage_account = storage_account
        self.container = container
        self._adapter_factory = adapter_factory or AzureBlobAdapter.from_connection_string
        self._connection_string_factory = (
            connection_string_factory or ConnectionStringFactory()
        )
        self.honor_list_prefix = honor_list_prefix
        self._adapter: StorageAdapter | None = None
        self._blob_container: ContainerHandle | None = None

    def __enter__(self) -> "BlobRepository":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()

    @property
    def connected(self) -> bool:
        return self._blob_container is not None

    def _require_container(self) -> ContainerHandle:
        if self._blob_container is None:
            raise NotConnectedError(
                f"Repository for container '{self.container}' is not connected"
            )
        return self._blob_container

    def connect(self, authentication_info: AuthenticationInfo | None) -> None:
        connection_string = self._connection_string_factory.create(
            authentication_info, self.storage_account
        )
        adapter = None
        try:
            adapter = self._adapter_factory(connection_string)
            blob_container = adapter.get_container(self.container)
            blob_container.get_properties()
        except StorageError as e:
            log.error("Could not connect to container %s", self.container, exc_info=True)
            if adapter is not None:
                adapter.close()
            raise AuthenticationError("Provide valid credentials") from e

        self.disconnect()
        self._adapter = adapter
        self._blob_container = blob_container
        log.debug("Connected to container %s", self.container)

    def copy(
        self,
        resource_name: str,
        destination: str | Path,
        transfer_progress: TransferProgress,
    ) -> None:
        blob_container = self._require_container()
        destination = Path(destination)
        log.debug(
            "Downloading key %s from container %s into %s",
            resource_name,
            self.container,
            destination.absolute(),
        )

        opened = False
        try:
            blob = blob_container.get_blob(resource_name)
            if not blob.exists():
                log.debug("Blob %s does not exist", resource_name)
                raise ResourceNotFoundError(resource_name)

            with ProgressWriter(destination, transfer_progress) as stream:
                opened = True
                blob.download_to(stream)
        except (StorageError, OSError) as e:
            if opened:
                # drop the partial download
                destination.unlink(missing_ok=True)
            raise ResourceNotFoundError("Could not download file from repo") from e

    def new_resource_available(
        self, resource_name: str, timestamp: int | float | datetime
    ) -> bool:
        """
        Return True if the blob was modified strictly after ``timestamp``
        (epoch milliseconds or an aware datetime). A missing blob is not
        newer.
        """
        blob_container = self._require_container()
        threshold = _to_millis(timestamp)
        log.debug("Checking if new key %s exists", resource_name)

        try:
            blob = blob_container.get_blob(resource_name)
            if not blob.exists():
                return False

            updated = blob.get_last_modified().timestamp() * 1000
        except StorageError as e:
            log.error("Could not fetch cloud blob", exc_info=True)
            raise ResourceNotFoundError(resource_name) from e
        return updated > threshold

    is_newer_than = new_resource_available

    def put(
        self,
        source: str | Path,
        destination: str,
        transfer_progress: TransferProgress,
    ) -> None:
        blob_container = self._require_container()
        log.debug("Uploading key %s", destination)

        try:
            blob = blob_container.get_blob(destination)
            with ProgressReader(source, transfer_progress) as stream:
                blob.upload(stream, overwrite=True)
        except (StorageError, OSError) as e:
            log.error("Could not upload cloud blob", exc_info=True)
            raise TransferFailedError(destination) from e

    def exists(self, resource_name: str) -> bool:
        blob_container = self._require_container()
        try:
            return blob_container.get_blob(resource_name).exists()
        except StorageError as e:
            log.error("Could not fetch cloud blob", exc_info=True)
            raise TransferFailedError(resource_name) from e

    def list(self, path: str) -> list[str]:
        """
        Return the names of all simple blobs in the container.

        ``path`` only filters the listing when ``honor_list_prefix`` is set;
        otherwise the whole container is listed.
        """
        blob_container = self._require_container()
        log.info("Listing files for %s", path)

        prefix = path if self.honor_list_prefix and path else ""
        try:
            return [
                item.name
                for item in blob_container.list_blobs(prefix)
                if not item.is_prefix
            ]
        except StorageError as e:
            log.error("Could not list container %s", self.container, exc_info=True)
            raise TransferFailedError(path) from e

    def disconnect(self) -> None:
        adapter, self._adapter = self._adapter, None
        self._blob_container = None
        if adapter is not None:
            adapter.close()
