import os
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, BinaryIO, Iterator

from .errors import BlobNotFoundError, StorageError
from .storage_protocols import (
    BlobHandle,
    BlobItem,
    ContainerHandle,
    StorageAdapter,
)


def _ensure_within(base: Path, target: Path, strict: bool = True) -> Path:
    """
    Resolve target path and ensure it is inside base path.
    strict=True will fail if the target does not exist (good for reads).
    strict=False allows non-existing targets (good for upload); existing
    symlinks along the path are still followed to catch escapes.
    """
    base_resolved = base.resolve()
    if strict:
        target_resolved = target.resolve(strict=True)
    else:
        target_resolved = target.resolve()
    if not target_resolved.is_relative_to(base_resolved):
        raise ValueError(
            f"Path {target_resolved} escapes base directory {base_resolved}"
        )
    return target_resolved


def _raise(error: OSError) -> None:
    raise error


def _mtime_utc(path: Path) -> datetime:
    return datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)


class LocalFileAdapter(StorageAdapter):
    """Local filesystem adapter for BlobRepository."""

    def __init__(self, base_path: str | Path, create_containers: bool = True):
        self._base_path = Path(base_path).resolve()
        self._base_path.mkdir(parents=True, exist_ok=True)
        self._create_containers = create_containers

    def get_container(self, container_name: str) -> ContainerHandle:
        container_path = _ensure_within(
            self._base_path, self._base_path / container_name, strict=False
        )
        if self._create_containers:
            container_path.mkdir(parents=True, exist_ok=True)
        return _LocalContainerHandle(container_path)

    def close(self) -> None:
        pass


class _LocalContainerHandle(ContainerHandle):
    def __init__(self, container_path: Path):
        self._container_path = container_path

    def get_blob(self, blob_name: str) -> BlobHandle:
        blob_path = _ensure_within(
            self._container_path, self._container_path / blob_name, strict=False
        )
        return _LocalBlobHandle(blob_path, self._container_path)

    def get_properties(self) -> dict[str, Any]:
        if not self._container_path.is_dir():
            raise BlobNotFoundError(f"Container '{self._container_path.name}' not found")
        return {
            "name": self._container_path.name,
            "last_modified": _mtime_utc(self._container_path),
            "etag": None,
            "metadata": {},
        }

    def list_blobs(self, prefix: str = "") -> Iterator[BlobItem]:
        if not self._container_path.is_dir():
            raise BlobNotFoundError(f"Container '{self._container_path.name}' not found")
        try:
            for dirpath, dirnames, filenames in os.walk(
                self._container_path, onerror=_raise
            ):
                dirnames.sort()
                current = Path(dirpath)
                for dirname in dirnames:
                    rel_path = (current / dirname).relative_to(self._container_path)
                    if rel_path.as_posix().startswith(prefix):
                        yield BlobItem(name=rel_path.as_posix(), is_prefix=True)
                for filename in sorted(filenames):
                    path = current / filename
                    # Strict resolve to catch symlink escapes
                    _ensure_within(self._container_path, path, strict=True)
                    rel_path = path.relative_to(self._container_path).as_posix()
                    if rel_path.startswith(prefix):
                        yield BlobItem(name=rel_path)
        except (OSError, ValueError) as e:
            raise StorageError(
                f"Could not list container '{self._container_path.name}'"
            ) from e


class _LocalBlobHandle(BlobHandle):
    def __init__(self, file_path: Path, container_path: Path):
        self._file_path = file_path
        self._container_path = container_path

    def exists(self) -> bool:
        return self._file_path.is_file()

    def get_last_modified(self) -> datetime:
        if not self.exists():
            raise BlobNotFoundError(f"Blob '{self._file_path.name}' not found")
        try:
            _ensure_within(self._container_path, self._file_path, strict=True)
            return _mtime_utc(self._file_path)
        except OSError as e:
            raise StorageError(f"Could not stat blob '{self._file_path}'") from e

    def download_to(self, stream: BinaryIO) -> None:
        if not self.exists():
            raise BlobNotFoundError(f"Blob '{self._file_path.name}' not found")
        try:
            _ensure_within(self._container_path, self._file_path, strict=True)
            with open(self._file_path, "rb") as source:
                shutil.copyfileobj(source, stream)
        except OSError as e:
            raise StorageError(f"Could not read blob '{self._file_path}'") from e

    def upload(self, stream: BinaryIO, overwrite: bool = True) -> None:
        if self._file_path.exists() and not overwrite:
            raise StorageError(f"Blob {self._file_path} already exists")
        _ensure_within(self._container_path, self._file_path, strict=False)
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._file_path, "wb") as target:
                shutil.copyfileobj(stream, target)
        except OSError as e:
            raise StorageError(f"Could not write blob '{self._file_path}'") from e
