"""The Internet checksum (one's-complement sum of 16-bit words)."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Union

_BYTES_TYPES = (bytes, bytearray, memoryview)
_MASK32 = 0xFFFFFFFF

BytesInput = Union[bytes, bytearray, memoryview, Iterable["BytesInput"]]


class InternetChecksum:
    """Accumulates data and yields its Internet checksum."""

    def __init__(self, initial: int = 0) -> None:
        self._sum = initial & _MASK32
        self._parity = False

    def add(self, data: BytesInput) -> None:
        """Add a bytes-like object, or an iterable of them, to the sum."""
        if isinstance(data, str):
            raise TypeError("InternetChecksum.add expects bytes, not str")
        if not isinstance(data, _BYTES_TYPES):
            for piece in data:
                self.add(piece)
            return

        chunk = bytes(data)
        if not chunk:
            return
        if self._parity:
            self._sum += chunk[0]
            self._parity = False
            chunk = chunk[1:]
        high = sum(chunk[0::2])
        low = sum(chunk[1::2])
        self._sum = (self._sum + (high << 8) + low) & _MASK32
        self._parity = len(chunk) % 2 == 1

    def value(self) -> int:
        """Return the folded, complemented 16-bit checksum."""
        ret = self._sum
        while ret > 0xFFFF:
            ret = (ret >> 16) + (ret & 0xFFFF)
        return ~ret & 0xFFFF