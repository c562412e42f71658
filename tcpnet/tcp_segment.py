"""Full TCP segments: a TCP message plus ports and checksum."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from .checksum import InternetChecksum
from .parser import Parser, Serializer
from .tcp_message import TCPMessage, UserDatagramInfo

_FLAG_ACK = 0b0001_0000
_FLAG_RST = 0b0000_0100
_FLAG_SYN = 0b0000_0010
_FLAG_FIN = 0b0000_0001


def _pretty_print(data: bytes, max_length: int = 32) -> str:
    out: list[str] = []
    length = 0
    truncated = False
    for byte in data:
        if length >= max_length:
            truncated = True
            break
        piece = chr(byte) if 0x20 <= byte <= 0x7E and byte != ord('"') else f"\\x{byte:02x}"
        out.append(piece)
        length += len(piece)
    ret = "".join(out)
    if truncated:
        ret = ret[:-3] + "..." if len(ret) >= 3 else ret + "..."
    return ret


@dataclass
class TCPSegment:
    """A complete TCP segment (options are skipped when parsing)."""

    HEADER_LENGTH: ClassVar[int] = 20

    message: TCPMessage = field(default_factory=TCPMessage)
    udinfo: UserDatagramInfo = field(default_factory=UserDatagramInfo)

    @classmethod
    def parse(cls, parser: Parser, pseudo_checksum: int) -> TCPSegment:
        """Verify the checksum and read a segment.

        Problems are reported through ``parser.has_error()``.
        """
        seg = cls()
        check = InternetChecksum(pseudo_checksum)
        check.add(parser.buffer())
        if check.value():
            parser.set_error()
            return seg

        sender = seg.message.sender
        receiver = seg.message.receiver

        seg.udinfo.src_port = parser.integer(2)
        seg.udinfo.dst_port = parser.integer(2)
        sender.seqno = parser.integer(4)
        receiver.ackno = parser.integer(4)

        data_offset = parser.integer(1) >> 4
        flags = parser.integer(1)
        if not flags & _FLAG_ACK:
            receiver.ackno = None
        sender.rst = receiver.rst = bool(flags & _FLAG_RST)
        sender.syn = bool(flags & _FLAG_SYN)
        sender.fin = bool(flags & _FLAG_FIN)

        receiver.window_size = parser.integer(2)
        seg.udinfo.cksum = parser.integer(2)
        parser.integer(2)  # urgent pointer

        if data_offset < cls.HEADER_LENGTH >> 2:
            parser.set_error()
            return seg
        parser.remove_prefix(data_offset * 4 - cls.HEADER_LENGTH)

        sender.payload = parser.concatenate_all_remaining()
        return seg

    def serialize(self, serializer: Serializer) -> None:
        sender = self.message.sender
        receiver = self.message.receiver
        serializer.integer(self.udinfo.src_port, 2)
        serializer.integer(self.udinfo.dst_port, 2)
        serializer.integer(sender.seqno, 4)
        serializer.integer(receiver.ackno if receiver.ackno is not None else 0, 4)
        serializer.integer((self.HEADER_LENGTH >> 2) << 4, 1)
        flags = (
            (_FLAG_ACK if receiver.ackno is not None else 0)
            | (_FLAG_RST if sender.rst or receiver.rst else 0)
            | (_FLAG_SYN if sender.syn else 0)
            | (_FLAG_FIN if sender.fin else 0)
        )
        serializer.integer(flags, 1)
        serializer.integer(receiver.window_size, 2)
        serializer.integer(self.udinfo.cksum, 2)
        serializer.integer(0, 2)  # urgent pointer
        serializer.buffer(sender.payload)

    def compute_checksum(self, pseudo_checksum: int) -> None:
        """Set the checksum, including the IP layer's pseudo-header sum."""
        self.udinfo.cksum = 0
        serializer = Serializer()
        self.serialize(serializer)
        check = InternetChecksum(pseudo_checksum)
        check.add(serializer.finish())
        self.udinfo.cksum = check.value()

    def __str__(self) -> str:
        sender = self.message.sender
        receiver = self.message.receiver
        parts = ["TCP", f"seqno={sender.seqno}"]
        if sender.syn:
            parts.append("+SYN")
        if sender.payload:
            parts.append(f'payload="{_pretty_print(sender.payload)}"')
        if sender.fin:
            parts.append("+FIN")
        if sender.rst or receiver.rst:
            parts.append("+RST")
        if receiver.ackno is not None:
            parts.append(f"ACK<{receiver.ackno}>")
        parts.append(f"winsize={receiver.window_size}")
        parts.append(f"src={self.udinfo.src_port} dst={self.udinfo.dst_port}")
        return " ".join(parts)