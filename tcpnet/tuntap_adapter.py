"""Carrying TCP over IPv4 datagrams read from and written to a TUN device."""

from __future__ import annotations

from typing import Optional

from .file_descriptor import FileDescriptor
from .helpers import parse, serialize
from .ipv4 import InternetDatagram, IPv4Header
from .tcp_message import TCPMessage
from .tcp_over_ip import TCPOverIPv4Adapter
from .tcp_segment import TCPSegment


class TCPOverIPv4OverTunFdAdapter(TCPOverIPv4Adapter):
    """Reads and writes IPv4 datagrams holding TCP segments through a TUN device."""

    def __init__(self, tun: FileDescriptor) -> None:
        super().__init__()
        self._tun = tun

    def read(self) -> Optional[TCPMessage]:
        """Read one datagram; return its TCP message if it belongs to this connection."""
        buffers = self._tun.readv([IPv4Header.LENGTH, TCPSegment.HEADER_LENGTH, 0])
        datagram = parse(InternetDatagram, buffers)
        if datagram is None:
            return None
        return self.unwrap_tcp_in_ip(datagram)

    def write(self, message: TCPMessage) -> None:
        """Wrap ``message`` in an IPv4 datagram and write it to the device."""
        self._tun.write(serialize(self.wrap_tcp_in_ip(message)))

    def fd(self) -> FileDescriptor:
        """The underlying device descriptor."""
        return self._tun