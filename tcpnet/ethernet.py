"""Ethernet frame headers and frames."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from .parser import Parser, Serializer

ETHERNET_ADDRESS_LENGTH = 6
ETHERNET_BROADCAST = b"\xff" * ETHERNET_ADDRESS_LENGTH


def format_ethernet_address(address: bytes) -> str:
    """Return the colon-separated lower-case hex form of an Ethernet address."""
    return ":".join(f"{byte:02x}" for byte in address)


def _address_integer(address: bytes) -> int:
    if len(address) != ETHERNET_ADDRESS_LENGTH:
        raise ValueError(f"Ethernet address must be {ETHERNET_ADDRESS_LENGTH} bytes, got {len(address)}")
    return int.from_bytes(address, "big")


@dataclass
class EthernetHeader:
    """An Ethernet frame header: destination, source and frame type."""

    LENGTH: ClassVar[int] = 14
    TYPE_IPv4: ClassVar[int] = 0x800
    TYPE_ARP: ClassVar[int] = 0x806

    dst: bytes = bytes(ETHERNET_ADDRESS_LENGTH)
    src: bytes = bytes(ETHERNET_ADDRESS_LENGTH)
    type: int = 0

    @classmethod
    def parse(cls, parser: Parser) -> EthernetHeader:
        """Read a header; check ``parser.has_error()`` afterwards."""
        dst = parser.string(ETHERNET_ADDRESS_LENGTH)
        src = parser.string(ETHERNET_ADDRESS_LENGTH)
        frame_type = parser.integer(2)
        return cls(dst=dst, src=src, type=frame_type)

    def serialize(self, serializer: Serializer) -> None:
        serializer.integer(_address_integer(self.dst), ETHERNET_ADDRESS_LENGTH)
        serializer.integer(_address_integer(self.src), ETHERNET_ADDRESS_LENGTH)
        serializer.integer(self.type, 2)

    def __str__(self) -> str:
        if self.type == self.TYPE_IPv4:
            type_str = "IPv4"
        elif self.type == self.TYPE_ARP:
            type_str = "ARP"
        else:
            type_str = f"[unknown type {self.type:x}!]"
        return (
            f"dst={format_ethernet_address(self.dst)}"
            f" src={format_ethernet_address(self.src)}"
            f" type={type_str}"
        )


@dataclass
class EthernetFrame:
    """An Ethernet header followed by its payload buffers."""

    header: EthernetHeader = field(default_factory=EthernetHeader)
    payload: list[bytes] = field(default_factory=list)

    @classmethod
    def parse(cls, parser: Parser) -> EthernetFrame:
        header = EthernetHeader.parse(parser)
        return cls(header=header, payload=parser.all_remaining())

    def serialize(self, serializer: Serializer) -> None:
        self.header.serialize(serializer)
        serializer.buffer(self.payload)