"""Big-endian parsing from, and serializing to, lists of byte buffers."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from typing import Union

_BYTES_TYPES = (bytes, bytearray, memoryview)

BufferInput = Union[bytes, bytearray, memoryview, Iterable[Union[bytes, bytearray, memoryview]]]


class _BufferList:
    """A queue of byte buffers with a read offset into the first one."""

    def __init__(self, buffers: BufferInput) -> None:
        if isinstance(buffers, _BYTES_TYPES):
            buffers = [buffers]
        self._buffers: deque[bytes] = deque(bytes(b) for b in buffers)
        self._skip = 0
        self.size = sum(len(b) for b in self._buffers)

    def peek(self) -> memoryview:
        if not self._buffers:
            raise RuntimeError("peek on empty BufferList")
        return memoryview(self._buffers[0])[self._skip :]

    def remove_prefix(self, length: int) -> None:
        while length and self._buffers:
            now = min(length, len(self.peek()))
            self._skip += now
            length -= now
            self.size -= now
            if self._skip == len(self._buffers[0]):
                self._buffers.popleft()
                self._skip = 0

    def truncate(self, length: int) -> None:
        if self.size <= length:
            return
        if length == 0:
            self._clear()
            return
        if self._skip:
            self._buffers[0] = self._buffers[0][self._skip :]
            self._skip = 0

        kept: deque[bytes] = deque()
        so_far = 0
        for buf in self._buffers:
            if so_far + len(buf) <= length:
                kept.append(buf)
                so_far += len(buf)
                if so_far == length:
                    break
                continue
            kept.append(buf[: length - so_far])
            break
        self._buffers = kept
        self.size = length

    def dump_all(self) -> list[bytes]:
        if self.size == 0:
            self._clear()
            return []
        out = list(self._buffers)
        if self._skip:
            out[0] = out[0][self._skip :]
        self._clear()
        return out

    def views(self) -> list[bytes]:
        if self.size == 0:
            return []
        out = list(self._buffers)
        if self._skip:
            out[0] = out[0][self._skip :]
        return out

    def _clear(self) -> None:
        self._buffers.clear()
        self._skip = 0
        self.size = 0


class Parser:
    """Reads big-endian integers and raw bytes from a list of buffers.

    Reading past the end sets a sticky error flag instead of raising.
    """

    def __init__(self, buffers: BufferInput) -> None:
        self._input = _BufferList(buffers)
        self._error = False

    def _check_size(self, size: int) -> None:
        if size > self._input.size:
            self._error = True

    def _take(self, size: int) -> bytes:
        parts = []
        while size:
            view = self._input.peek()[:size]
            parts.append(bytes(view))
            self._input.remove_prefix(len(view))
            size -= len(view)
        return b"".join(parts)

    def has_error(self) -> bool:
        return self._error

    def set_error(self) -> None:
        self._error = True

    def remove_prefix(self, n: int) -> None:
        """Discard up to ``n`` bytes from the front."""
        self._input.remove_prefix(n)

    def truncate(self, length: int) -> None:
        """Drop everything past the first ``length`` remaining bytes."""
        self._input.truncate(length)

    def all_remaining(self) -> list[bytes]:
        """Take every remaining buffer, leaving the parser empty."""
        return self._input.dump_all()

    def buffer(self) -> list[bytes]:
        """Return the remaining buffers without consuming them."""
        return self._input.views()

    def string(self, length: int) -> bytes:
        """Read exactly ``length`` bytes (zeros on error)."""
        self._check_size(length)
        if self._error:
            return bytes(length)
        return self._take(length)

    def concatenate_all_remaining(self) -> bytes:
        return b"".join(self.all_remaining())

    def integer(self, size: int) -> int:
        """Read an unsigned big-endian integer of ``size`` bytes (0 on error)."""
        self._check_size(size)
        if self._error:
            return 0
        return int.from_bytes(self._take(size), "big")


class Serializer:
    """Builds a list of byte buffers from integers and raw data."""

    def __init__(self) -> None:
        self._output: list[bytes] = []
        self._pending = bytearray()

    def _flush(self) -> None:
        if self._pending:
            self._output.append(bytes(self._pending))
            self._pending.clear()

    def integer(self, value: int, size: int) -> None:
        """Append ``value`` as an unsigned big-endian integer of ``size`` bytes."""
        mask = (1 << (8 * size)) - 1
        self._pending += (value & mask).to_bytes(size, "big")

    def buffer(self, data: BufferInput) -> None:
        """Append a bytes-like object, or each of an iterable of them."""
        if isinstance(data, str):
            raise TypeError("Serializer.buffer expects bytes, not str")
        if isinstance(data, _BYTES_TYPES):
            if data:
                self._flush()
                self._output.append(bytes(data))
            return
        for piece in data:
            self.buffer(piece)

    def finish(self) -> list[bytes]:
        """Return everything serialized so far and start afresh."""
        self._flush()
        out, self._output = self._output, []
        return out