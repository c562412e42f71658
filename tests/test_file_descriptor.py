import os

import pytest

from tcpnet.exceptions import UnixError
from tcpnet.file_descriptor import FileDescriptor


@pytest.fixture
def pipe():
    r, w = os.pipe()
    return FileDescriptor(r), FileDescriptor(w)


def test_write_then_read(pipe):
    reader, writer = pipe
    assert writer.write(b"hello") == 5
    assert reader.read() == b"hello"
    assert writer.write_count() == 1
    assert reader.read_count() == 1
    assert not reader.eof()


def test_write_multiple_buffers(pipe):
    reader, writer = pipe
    assert writer.write([b"ab", b"cd"]) == 4
    assert reader.read() == b"abcd"


def test_eof_after_writer_closed(pipe):
    reader, writer = pipe
    writer.close()
    assert writer.closed()
    assert writer.eof()
    assert reader.read() == b""
    assert reader.eof()


def test_nonblocking_read_without_data(pipe):
    reader, _writer = pipe
    reader.set_blocking(False)
    assert reader.read() == b""
    assert not reader.eof()
    assert reader.read_count() == 0


def test_readv_splits_data(pipe):
    reader, writer = pipe
    writer.write(b"abcdef")
    assert reader.readv([2, 2, 0]) == [b"ab", b"cd", b"ef"]
    assert reader.read_count() == 1


def test_readv_short_data(pipe):
    reader, writer = pipe
    writer.write(b"xy")
    assert reader.readv([4, 0]) == [b"xy", b""]


def test_readv_empty_sizes(pipe):
    reader, _writer = pipe
    assert reader.readv([]) == []


def test_fileno_matches_fd_num(pipe):
    reader, _writer = pipe
    assert reader.fileno() == reader.fd_num()


def test_invalid_fd_number():
    with pytest.raises(RuntimeError, match="invalid fd number"):
        FileDescriptor(-1)


def test_bad_descriptor_raises_unix_error():
    r, w = os.pipe()
    os.close(r)
    os.close(w)
    with pytest.raises(UnixError):
        FileDescriptor(r)


def test_double_close_raises(pipe):
    reader, _writer = pipe
    reader.close()
    with pytest.raises(UnixError) as info:
        reader.close()
    assert info.value.attempt == "close"


def test_context_manager_closes(pipe):
    reader, writer = pipe
    with writer as handle:
        handle.write(b"q")
    assert writer.closed()
    assert reader.read() == b"q"


def test_write_str_rejected(pipe):
    _reader, writer = pipe
    with pytest.raises(TypeError):
        writer.write("text")