import os
import uuid
from dataclasses import dataclass
from typing import Callable

import pytest
from dotenv import load_dotenv

from blobwagon import AuthenticationInfo, LocalFileAdapter, StorageAdapter

load_dotenv()

# Azure config
CONN_STR = os.environ.get("AZURE_CONN_STR")
CONTAINER_NAME = os.environ.get("AZURE_CONTAINER")

# Local config
LOCAL_CONTAINER = "test_container"


def unique_key(suffix: str) -> str:
    return f"test_{suffix}_{uuid.uuid4()}"


@dataclass
class Backend:
    name: str
    container: str
    authentication_info: AuthenticationInfo
    adapter_factory: Callable[[str], StorageAdapter] | None


class RecordingProgress:
    """Collects every chunk reported by a progress-reporting stream."""

    def __init__(self):
        self.chunks: list[bytes] = []

    def progress(self, buffer: bytes, length: int) -> None:
        self.chunks.append(bytes(buffer[:length]))

    @property
    def total(self) -> int:
        return sum(len(c) for c in self.chunks)


def _cleanup_azure(container: str) -> None:
    from azure.storage.blob import BlobServiceClient

    blob_service_client = BlobServiceClient.from_connection_string(CONN_STR)
    container_client = blob_service_client.get_container_client(container)
    for blob in container_client.list_blobs(name_starts_with="test_"):
        container_client.delete_blob(blob.name)


# ---------------------------
# Parametrize backends
# ---------------------------
@pytest.fixture(
    params=[
        pytest.param("azure", marks=pytest.mark.azure),
        pytest.param("local", marks=pytest.mark.local),
    ]
)
def backend(request, tmp_path):
    """Fixture that provides either the Azure or the local backend."""
    if request.param == "azure":
        if not CONN_STR or not CONTAINER_NAME:
            pytest.skip(
                "Azure backend not configured (AZURE_CONN_STR / AZURE_CONTAINER missing)"
            )

        _cleanup_azure(CONTAINER_NAME)
        yield Backend(
            name="azure",
            container=CONTAINER_NAME,
            authentication_info=AuthenticationInfo(connection_string=CONN_STR),
            adapter_factory=None,
        )
        _cleanup_azure(CONTAINER_NAME)

    elif request.param == "local":
        # tmp_path is auto-cleaned by pytest
        storage_root = tmp_path / "storage"
        yield Backend(
            name="local",
            container=LOCAL_CONTAINER,
            authentication_info=AuthenticationInfo(
                user_name="devaccount", password="devkey"
            ),
            adapter_factory=lambda connection_string: LocalFileAdapter(storage_root),
        )


@pytest.fixture
def progress():
    return RecordingProgress()
