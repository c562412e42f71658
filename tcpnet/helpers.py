"""Convenience functions for serializing, parsing and describing packets."""

from __future__ import annotations

import copy
from collections.abc import Iterable
from typing import Any, Optional, TypeVar

from .arp import ARPMessage
from .ethernet import EthernetFrame, EthernetHeader
from .ipv4 import InternetDatagram, IPv4Header
from .parser import BufferInput, Parser, Serializer
from .tcp_segment import TCPSegment

T = TypeVar("T")

DEFAULT_PRETTY_PRINT_LENGTH = 32


def serialize(obj: Any) -> list[bytes]:
    """Serialize any object that has a ``serialize(serializer)`` method."""
    serializer = Serializer()
    obj.serialize(serializer)
    return serializer.finish()


def parse(cls: type[T], buffers: BufferInput, *args: Any) -> Optional[T]:
    """Parse an instance of ``cls`` from ``buffers``; return None if parsing failed."""
    parser = Parser(buffers)
    obj = cls.parse(parser, *args)  # type: ignore[attr-defined]
    if parser.has_error():
        return None
    return obj


def concat(buffers: Iterable[bytes]) -> bytes:
    """Join a sequence of buffers into one."""
    return b"".join(bytes(b) for b in buffers)


def pretty_print(data: bytes, max_length: int = DEFAULT_PRETTY_PRINT_LENGTH) -> str:
    """Escape unprintable bytes (and double quotes), truncating long output with "..."."""
    pieces: list[str] = []
    length = 0
    truncated = False
    for byte in bytes(data):
        if length >= max_length:
            truncated = True
            break
        if 0x20 <= byte <= 0x7E and byte != ord('"'):
            piece = chr(byte)
        else:
            piece = f"\\x{byte:02x}"
        pieces.append(piece)
        length += len(piece)
    ret = "".join(pieces)
    if truncated:
        ret = ret[:-3] + "..." if len(ret) >= 3 else ret + "..."
    return ret


def _describe_ipv4(payload: list[bytes]) -> str:
    dgram = parse(InternetDatagram, clone(payload))
    if dgram is None:
        return "bad IPv4 datagram"
    out = f"{dgram.header} payload="
    if dgram.header.proto == IPv4Header.PROTO_TCP:
        seg = parse(TCPSegment, dgram.payload, dgram.header.pseudo_checksum())
        return out + (str(seg) if seg is not None else "bad TCP segment")
    return out + '"' + pretty_print(concat(dgram.payload)) + '"'


def _describe_arp(payload: list[bytes]) -> str:
    arp = parse(ARPMessage, clone(payload))
    return str(arp) if arp is not None else "bad ARP message"


def summary(frame: EthernetFrame) -> str:
    """Describe an Ethernet frame and what it carries in one line."""
    out = f"{frame.header} payload: "
    if frame.header.type == EthernetHeader.TYPE_IPv4:
        return out + _describe_ipv4(frame.payload)
    if frame.header.type == EthernetHeader.TYPE_ARP:
        return out + _describe_arp(frame.payload)
    return out + "unknown frame type"


def clone(obj: T) -> T:
    """Return an independent copy of a frame, datagram or other packet object."""
    return copy.deepcopy(obj)