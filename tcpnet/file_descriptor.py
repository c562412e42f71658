"""Reference-counted handles to kernel file descriptors."""

from __future__ import annotations

import errno
import os
import sys
from collections.abc import Iterable
from typing import Any, Union

from .exceptions import UnixError

_BYTES_TYPES = (bytes, bytearray, memoryview)
_WOULD_BLOCK = (errno.EAGAIN, errno.EINPROGRESS)

WriteInput = Union[bytes, bytearray, memoryview, Iterable[Union[bytes, bytearray, memoryview]]]


class _FDWrapper:
    """The shared state of one kernel file descriptor; closes it when collected."""

    def __init__(self, fd: int) -> None:
        self.closed = True
        if fd < 0:
            raise RuntimeError(f"invalid fd number:{fd}")
        try:
            blocking = os.get_blocking(fd)
        except OSError as exc:
            raise UnixError("fcntl", exc.errno) from exc
        self.fd = fd
        self.eof = False
        self.closed = False
        self.non_blocking = not blocking
        self.read_count = 0
        self.write_count = 0

    def would_block(self, exc: OSError) -> bool:
        return self.non_blocking and exc.errno in _WOULD_BLOCK

    def close(self) -> None:
        try:
            os.close(self.fd)
        except OSError as exc:
            raise UnixError("close", exc.errno) from exc
        self.eof = self.closed = True

    def __del__(self) -> None:
        if self.closed:
            return
        try:
            self.close()
        except Exception as exc:  # never raise from a finalizer
            print(f"Exception destructing FDWrapper: {exc}", file=sys.stderr)


class FileDescriptor:
    """A handle to a file descriptor; duplicates share the descriptor and its counters."""

    READ_BUFFER_SIZE = 16384

    def __init__(self, fd: int) -> None:
        self._wrapper = _FDWrapper(fd)

    @classmethod
    def _sharing(cls, wrapper: _FDWrapper) -> FileDescriptor:
        obj = FileDescriptor.__new__(FileDescriptor)
        obj._wrapper = wrapper
        return obj

    def _set_eof(self) -> None:
        self._wrapper.eof = True

    def _register_read(self) -> None:
        self._wrapper.read_count += 1

    def _register_write(self) -> None:
        self._wrapper.write_count += 1

    def read(self, size: int = READ_BUFFER_SIZE) -> bytes:
        """Read up to ``size`` bytes.

        Returns b"" at end of file (setting ``eof()``) or, on a non-blocking
        descriptor, when nothing is available (leaving ``eof()`` unset).
        """
        if size <= 0:
            size = self.READ_BUFFER_SIZE
        try:
            data = os.read(self.fd_num(), size)
        except OSError as exc:
            if self._wrapper.would_block(exc):
                return b""
            raise UnixError("read", exc.errno) from exc
        self._register_read()
        if not data:
            self._wrapper.eof = True
        if len(data) > size:
            raise RuntimeError("read() read more than requested")
        return data

    def readv(self, sizes: Iterable[int]) -> list[bytes]:
        """Scatter-read into buffers of the given sizes.

        The last buffer is always READ_BUFFER_SIZE bytes long. Each returned
        buffer holds what was read into it; buffers past the data are empty.
        Returns [] when given no sizes, or when a non-blocking read would block.
        """
        sizes = list(sizes)
        if not sizes:
            return []
        sizes[-1] = self.READ_BUFFER_SIZE
        buffers = [bytearray(n) for n in sizes]
        try:
            bytes_read = os.readv(self.fd_num(), buffers)
        except OSError as exc:
            if self._wrapper.would_block(exc):
                return []
            raise UnixError("read", exc.errno) from exc
        self._register_read()
        if bytes_read > sum(sizes):
            raise RuntimeError("read() read more than requested")

        result = []
        remaining = bytes_read
        for buf in buffers:
            take = min(remaining, len(buf))
            result.append(bytes(buf[:take]))
            remaining -= take
        return result

    def write(self, data: WriteInput) -> int:
        """Write a buffer, or a sequence of buffers; return the number of bytes written."""
        if isinstance(data, str):
            raise TypeError("FileDescriptor.write expects bytes, not str")
        if isinstance(data, _BYTES_TYPES):
            buffers = [bytes(data)]
        else:
            buffers = [bytes(b) for b in data]
        total = sum(len(b) for b in buffers)
        try:
            written = os.writev(self.fd_num(), buffers or [b""])
        except OSError as exc:
            if not self._wrapper.would_block(exc):
                raise UnixError("writev", exc.errno) from exc
            written = 0
        self._register_write()
        if written == 0 and total != 0:
            raise RuntimeError("write returned 0 given non-empty input buffer")
        if written > total:
            raise RuntimeError("write wrote more than length of input buffer")
        return written

    def close(self) -> None:
        """Close the underlying descriptor now."""
        self._wrapper.close()

    def duplicate(self) -> FileDescriptor:
        """Return another handle sharing this descriptor."""
        return self._sharing(self._wrapper)

    def set_blocking(self, blocking: bool) -> None:
        try:
            os.set_blocking(self.fd_num(), blocking)
        except OSError as exc:
            raise UnixError("fcntl", exc.errno) from exc
        self._wrapper.non_blocking = not blocking

    def fileno(self) -> int:
        return self._wrapper.fd

    def fd_num(self) -> int:
        return self._wrapper.fd

    def eof(self) -> bool:
        return self._wrapper.eof

    def closed(self) -> bool:
        return self._wrapper.closed

    def read_count(self) -> int:
        return self._wrapper.read_count

    def write_count(self) -> int:
        return self._wrapper.write_count

    def __enter__(self) -> FileDescriptor:
        return self

    def __exit__(self, *args: Any) -> None:
        if not self.closed():
            self.close()