"""Conversion between TCP messages and IPv4 datagrams carrying TCP segments."""

from __future__ import annotations

from typing import Optional

from .address import Address
from .fd_adapter import FdAdapterBase
from .helpers import parse, serialize
from .ipv4 import InternetDatagram, IPv4Header, format_ipv4
from .tcp_message import TCPMessage
from .tcp_segment import TCPSegment


class TCPOverIPv4Adapter(FdAdapterBase):
    """Wraps TCP messages in IPv4 datagrams and unwraps those that belong to the connection."""

    def unwrap_tcp_in_ip(self, datagram: InternetDatagram) -> Optional[TCPMessage]:
        """Return the TCP message inside ``datagram``, or None if it is invalid or unrelated.

        While listening, a SYN (without RST) fixes the connection's addresses and
        ports from the datagram and ends the listening state.
        """
        cfg = self.config()
        header = datagram.header

        # Binding to address "0" is allowed; replies then come from the address contacted.
        if not self.listening() and header.dst != cfg.source.ipv4_numeric():
            return None
        if not self.listening() and header.src != cfg.destination.ipv4_numeric():
            return None
        if header.proto != IPv4Header.PROTO_TCP:
            return None

        seg = parse(TCPSegment, datagram.payload, header.pseudo_checksum())
        if seg is None:
            return None

        if seg.udinfo.dst_port != cfg.source.port():
            return None

        if self.listening():
            sender = seg.message.sender
            if not sender.syn or sender.rst:
                return None
            cfg.source = Address(format_ipv4(header.dst), cfg.source.port())
            cfg.destination = Address(format_ipv4(header.src), seg.udinfo.src_port)
            self.set_listening(False)

        if seg.udinfo.src_port != cfg.destination.port():
            return None

        return seg.message

    def wrap_tcp_in_ip(self, message: TCPMessage) -> InternetDatagram:
        """Build an IPv4 datagram carrying ``message`` with this connection's addresses and ports."""
        cfg = self.config()
        seg = TCPSegment(message=message)
        seg.udinfo.src_port = cfg.source.port()
        seg.udinfo.dst_port = cfg.destination.port()

        datagram = InternetDatagram()
        datagram.header.src = cfg.source.ipv4_numeric()
        datagram.header.dst = cfg.destination.ipv4_numeric()
        datagram.header.len = (
            datagram.header.hlen * 4 + TCPSegment.HEADER_LENGTH + len(message.sender.payload)
        )

        seg.compute_checksum(datagram.header.pseudo_checksum())
        datagram.header.compute_checksum()
        datagram.payload = serialize(seg)
        return datagram