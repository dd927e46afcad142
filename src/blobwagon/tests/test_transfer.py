import shutil

import pytest

from blobwagon import NullTransferProgress, ProgressReader, ProgressWriter


def test_reader_reports_every_chunk(tmp_path, progress):
    payload = bytes(range(256)) * 100
    source = tmp_path / "source.bin"
    source.write_bytes(payload)

    with ProgressReader(source, progress) as stream:
        first = stream.read(1000)
        rest = stream.read()

    assert first + rest == payload
    assert progress.total == len(payload)
    assert len(progress.chunks[0]) == 1000


def test_writer_reports_every_chunk(tmp_path, progress):
    target = tmp_path / "target.bin"
    with ProgressWriter(target, progress) as stream:
        stream.write(b"abc")
        stream.write(memoryview(b"defg"))

    assert target.read_bytes() == b"abcdefg"
    assert progress.chunks == [b"abc", b"defg"]


def test_copy_between_wrapped_streams(tmp_path, progress):
    payload = b"x" * (3 * 1024 * 1024 + 17)
    source = tmp_path / "source.bin"
    source.write_bytes(payload)
    target = tmp_path / "target.bin"

    with (
        ProgressReader(source, NullTransferProgress()) as reader,
        ProgressWriter(target, progress) as writer,
    ):
        shutil.copyfileobj(reader, writer)

    assert target.read_bytes() == payload
    assert progress.total == len(payload)


def test_streams_close_wrapped_file(tmp_path):
    source = tmp_path / "source.bin"
    source.write_bytes(b"data")
    reader = ProgressReader(source, NullTransferProgress())
    writer = ProgressWriter(tmp_path / "target.bin", NullTransferProgress())
    reader.close()
    writer.close()
    assert reader.closed and reader._file.closed
    assert writer.closed and writer._file.closed
    reader.close()  # closing twice is harmless


def test_streams_are_one_directional(tmp_path):
    source = tmp_path / "source.bin"
    source.write_bytes(b"data")
    with ProgressReader(source, NullTransferProgress()) as reader:
        assert reader.readable()
        assert not reader.writable()
        assert not reader.seekable()
    with ProgressWriter(tmp_path / "t.bin", NullTransferProgress()) as writer:
        assert writer.writable()
        assert not writer.readable()


def test_reader_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        ProgressReader(tmp_path / "missing.bin", NullTransferProgress())
