"""
Repository-transport facade over BlobRepository.

A wagon is addressed by a URL of the form ``bs://<account>/<container>/<base>``.
Resource names given to the wagon are resolved against the base directory
before they reach the container, and every transfer is reported to the
registered transfer listeners.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Protocol
from urllib.parse import urlparse

from .credentials import AuthenticationInfo
from .errors import ResourceNotFoundError, TransferFailedError
from .repository import AdapterFactory, BlobRepository

log = logging.getLogger(__name__)

SCHEME = "bs"
REQUEST_GET = "get"
REQUEST_PUT = "put"


class TransferListener(Protocol):
    def transfer_started(self, resource_name: str, request: str) -> None: ...

    def transfer_progress(self, resource_name: str, buffer: bytes, length: int) -> None: ...

    def transfer_completed(self, resource_name: str, request: str) -> None: ...

    def transfer_error(self, resource_name: str, request: str, error: Exception) -> None: ...


@dataclass(frozen=True)
class RepositoryLocation:
    account: str
    container: str
    base_directory: str = ""


def parse_repository_url(url: str) -> RepositoryLocation:
    """Split ``bs://account/container/base/dir`` into its parts."""
    parsed = urlparse(url)
    if parsed.scheme != SCHEME:
        raise ValueError(f"Invalid repository URL (expected {SCHEME}://...): {url}")
    if not parsed.netloc:
        raise ValueError(f"Repository URL has no storage account: {url}")
    parts = [p for p in parsed.path.split("/") if p]
    if not parts:
        raise ValueError(f"Repository URL has no container: {url}")
    return RepositoryLocation(
        account=parsed.netloc,
        container=parts[0],
        base_directory="/".join(parts[1:]),
    )


def _join_key(*parts: str) -> str:
    segments = []
    for part in parts:
        segments.extend(s for s in part.replace("\\", "/").split("/") if s)
    return "/".join(segments)


class _ListenerProgress:
    """Forwards stream progress to the wagon's transfer listeners."""

    def __init__(self, listeners: list[TransferListener], resource_name: str):
        self._listeners = listeners
        self._resource_name = resource_name

    def progress(self, buffer: bytes, length: int) -> None:
        for listener in self._listeners:
            listener.transfer_progress(self._resource_name, buffer, length)


class StorageWagon:
    """
    Usage::

        wagon = StorageWagon("bs://myaccount/releases/maven")
        wagon.connect(AuthenticationInfo(user_name="myaccount", password=key))
        wagon.put("target/lib-1.0.jar", "com/acme/lib/1.0/lib-1.0.jar")
    """

    def __init__(
        self,
        url: str,
        adapter_factory: AdapterFactory | None = None,
        honor_list_prefix: bool = False,
    ):
        self.location = parse_repository_url(url)
        self.repository = BlobRepository(
            self.location.account,
            self.location.container,
            adapter_factory=adapter_factory,
            honor_list_prefix=honor_list_prefix,
        )
        self._listeners: list[TransferListener] = []

    def add_transfer_listener(self, listener: TransferListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_transfer_listener(self, listener: TransferListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def connect(self, authentication_info: AuthenticationInfo | None = None) -> None:
        if authentication_info is None:
            authentication_info = AuthenticationInfo.from_env()
        log.info(
            "Connecting to container %s of account %s",
            self.location.container,
            self.location.account,
        )
        self.repository.connect(authentication_info)

    def disconnect(self) -> None:
        self.repository.disconnect()

    def resolve_key(self, resource_name: str) -> str:
        return _join_key(self.location.base_directory, resource_name)

    def supports_directory_copy(self) -> bool:
        return True

    def _transfer(self, resource_name: str, request: str, action) -> None:
        for listener in self._listeners:
            listener.transfer_started(resource_name, request)
        try:
            action(_ListenerProgress(self._listeners, resource_name))
        except Exception as e:
            for listener in self._listeners:
                listener.transfer_error(resource_name, request, e)
            raise
        for listener in self._listeners:
            listener.transfer_completed(resource_name, request)

    def get(self, resource_name: str, destination: str | Path) -> None:
        destination = Path(destination)
        key = self.resolve_key(resource_name)

        def download(progress):
            try:
                destination.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise ResourceNotFoundError(
                    f"Could not create directory for {destination}"
                ) from e
            self.repository.copy(key, destination, progress)

        self._transfer(resource_name, REQUEST_GET, download)

    def get_if_newer(
        self,
        resource_name: str,
        destination: str | Path,
        timestamp: int | float | datetime,
    ) -> bool:
        """Download only if the remote copy is newer; return whether it was."""
        key = self.resolve_key(resource_name)
        if not self.repository.new_resource_available(key, timestamp):
            return False
        self.get(resource_name, destination)
        return True

    def put(self, source: str | Path, destination: str) -> None:
        key = self.resolve_key(destination)
        self._transfer(
            destination,
            REQUEST_PUT,
            lambda progress: self.repository.put(source, key, progress),
        )

    def put_directory(self, source_directory: str | Path, destination_directory: str) -> None:
        source_directory = Path(source_directory)
        if not source_directory.is_dir():
            raise TransferFailedError(f"{source_directory} is not a directory")
        for path in sorted(source_directory.rglob("*")):
            if path.is_file():
                relative = path.relative_to(source_directory).as_posix()
                self.put(path, _join_key(destination_directory, relative))

    def resource_exists(self, resource_name: str) -> bool:
        return self.repository.exists(self.resolve_key(resource_name))

    def get_file_list(self, destination_directory: str) -> list[str]:
        """
        List blob names relative to the base directory.

        Blobs outside the base directory are left out. The directory is
        resolved against the base directory before it reaches
        BlobRepository.list.
        """
        base = self.location.base_directory
        names = self.repository.list(self.resolve_key(destination_directory))
        if not base:
            return names
        prefix = base + "/"
        return [name[len(prefix):] for name in names if name.startswith(prefix)]
