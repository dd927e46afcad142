"""
Progress-reporting file streams.

Files moved to or from storage are wrapped so that every chunk that passes
through them is reported to a ``TransferProgress`` sink.
"""

import io
from pathlib import Path
from typing import Protocol


class TransferProgress(Protocol):
    """Receives the chunks moved through a wrapped stream."""

    def progress(self, buffer: bytes, length: int) -> None: ...


class NullTransferProgress:
    """Progress sink that discards every report."""

    def progress(self, buffer: bytes, length: int) -> None:
        pass


class ProgressReader(io.RawIOBase):
    """Read-only stream over a local file that reports each chunk read."""

    _file = None

    def __init__(self, path: str | Path, transfer_progress: TransferProgress):
        self._file = open(path, "rb")
        self._transfer_progress = transfer_progress

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        data = self._file.read(len(buffer))
        length = len(data)
        buffer[:length] = data
        if length:
            self._transfer_progress.progress(data, length)
        return length

    def close(self) -> None:
        try:
            super().close()
        finally:
            if self._file is not None:
                self._file.close()


class ProgressWriter(io.RawIOBase):
    """Write-only stream over a local file that reports each chunk written."""

    _file = None

    def __init__(self, path: str | Path, transfer_progress: TransferProgress):
        self._file = open(path, "wb")
        self._transfer_progress = transfer_progress

    def writable(self) -> bool:
        return True

    def write(self, data) -> int:
        written = self._file.write(data)
        if written:
            self._transfer_progress.progress(bytes(data[:written]), written)
        return written

    def flush(self) -> None:
        # RawIOBase.close() flushes before marking the stream closed
        if not self.closed and self._file is not None:
            self._file.flush()

    def close(self) -> None:
        try:
            super().close()
        finally:
            if self._file is not None:
                self._file.close()
