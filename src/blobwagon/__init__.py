"""
blobwagon
=========

Artifact repository transport backed by Azure Blob Storage.

Main entry points:
- BlobRepository: connect/copy/put/exists/list against one container
- StorageWagon: host-facing facade resolving names against a bs:// URL
- AzureBlobAdapter, LocalFileAdapter: storage backends
- AuthenticationInfo, ConnectionStringFactory: credentials
- AuthenticationError, ResourceNotFoundError, TransferFailedError,
  NotConnectedError: exceptions

Example:
    from blobwagon import AuthenticationInfo, BlobRepository, NullTransferProgress

    repository = BlobRepository("myaccount", "releases")
    repository.connect(AuthenticationInfo(user_name="myaccount", password=key))
    repository.put("lib-1.0.jar", "com/acme/lib/1.0/lib-1.0.jar", NullTransferProgress())
"""

from .errors import (
    AuthenticationError,
    BlobNotFoundError,
    NotConnectedError,
    ResourceNotFoundError,
    StorageError,
    TransferFailedError,
    WagonError,
)

from .credentials import AuthenticationInfo, ConnectionStringFactory
from .transfer import (
    NullTransferProgress,
    ProgressReader,
    ProgressWriter,
    TransferProgress,
)

from .storage_protocols import (
    StorageAdapter,
    ContainerHandle,
    BlobHandle,
    BlobItem,
)
from .local_file_adapter import LocalFileAdapter
from .azure_blob_adapter import AzureBlobAdapter
from .repository import BlobRepository
from .wagon import RepositoryLocation, StorageWagon, TransferListener, parse_repository_url

import importlib.metadata

try:
    __version__ = importlib.metadata.version(__name__)
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "AuthenticationError",
    "BlobNotFoundError",
    "NotConnectedError",
    "ResourceNotFoundError",
    "StorageError",
    "TransferFailedError",
    "WagonError",
    "AuthenticationInfo",
    "ConnectionStringFactory",
    "NullTransferProgress",
    "ProgressReader",
    "ProgressWriter",
    "TransferProgress",
    "StorageAdapter",
    "ContainerHandle",
    "BlobHandle",
    "BlobItem",
    "LocalFileAdapter",
    "AzureBlobAdapter",
    "BlobRepository",
    "RepositoryLocation",
    "StorageWagon",
    "TransferListener",
    "parse_repository_url",
]
