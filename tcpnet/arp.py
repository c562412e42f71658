"""ARP messages for Ethernet/IPv4."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from .ethernet import ETHERNET_ADDRESS_LENGTH, EthernetHeader, format_ethernet_address
from .ipv4 import IPV4_ADDRESS_LENGTH, format_ipv4
from .parser import Parser, Serializer


@dataclass
class ARPMessage:
    """An ARP request or reply mapping IPv4 addresses to Ethernet addresses."""

    LENGTH: ClassVar[int] = 28
    TYPE_ETHERNET: ClassVar[int] = 1
    OPCODE_REQUEST: ClassVar[int] = 1
    OPCODE_REPLY: ClassVar[int] = 2

    hardware_type: int = 1
    protocol_type: int = EthernetHeader.TYPE_IPv4
    hardware_address_size: int = ETHERNET_ADDRESS_LENGTH
    protocol_address_size: int = IPV4_ADDRESS_LENGTH
    opcode: int = 0

    sender_ethernet_address: bytes = bytes(ETHERNET_ADDRESS_LENGTH)
    sender_ip_address: int = 0

    target_ethernet_address: bytes = bytes(ETHERNET_ADDRESS_LENGTH)
    target_ip_address: int = 0

    def supported(self) -> bool:
        """Is this an Ethernet/IPv4 request or reply?"""
        return (
            self.hardware_type == self.TYPE_ETHERNET
            and self.protocol_type == EthernetHeader.TYPE_IPv4
            and self.hardware_address_size == ETHERNET_ADDRESS_LENGTH
            and self.protocol_address_size == IPV4_ADDRESS_LENGTH
            and self.opcode in (self.OPCODE_REQUEST, self.OPCODE_REPLY)
        )

    @classmethod
    def parse(cls, parser: Parser) -> ARPMessage:
        """Read a message; unsupported combinations set the parser's error flag."""
        msg = cls(
            hardware_type=parser.integer(2),
            protocol_type=parser.integer(2),
            hardware_address_size=parser.integer(1),
            protocol_address_size=parser.integer(1),
            opcode=parser.integer(2),
        )
        if not msg.supported():
            parser.set_error()
            return msg

        msg.sender_ethernet_address = parser.string(ETHERNET_ADDRESS_LENGTH)
        msg.sender_ip_address = parser.integer(IPV4_ADDRESS_LENGTH)
        msg.target_ethernet_address = parser.string(ETHERNET_ADDRESS_LENGTH)
        msg.target_ip_address = parser.integer(IPV4_ADDRESS_LENGTH)
        return msg

    def serialize(self, serializer: Serializer) -> None:
        if not self.supported():
            raise RuntimeError(
                "ARPMessage: unsupported field combination (must be Ethernet/IP, and request or reply)"
            )
        for address in (self.sender_ethernet_address, self.target_ethernet_address):
            if len(address) != ETHERNET_ADDRESS_LENGTH:
                raise ValueError(f"Ethernet address must be {ETHERNET_ADDRESS_LENGTH} bytes")

        serializer.integer(self.hardware_type, 2)
        serializer.integer(self.protocol_type, 2)
        serializer.integer(self.hardware_address_size, 1)
        serializer.integer(self.protocol_address_size, 1)
        serializer.integer(self.opcode, 2)

        serializer.integer(int.from_bytes(self.sender_ethernet_address, "big"), ETHERNET_ADDRESS_LENGTH)
        serializer.integer(self.sender_ip_address, IPV4_ADDRESS_LENGTH)
        serializer.integer(int.from_bytes(self.target_ethernet_address, "big"), ETHERNET_ADDRESS_LENGTH)
        serializer.integer(self.target_ip_address, IPV4_ADDRESS_LENGTH)

    def __str__(self) -> str:
        if self.opcode == self.OPCODE_REQUEST:
            opcode_str = "REQUEST"
        elif self.opcode == self.OPCODE_REPLY:
            opcode_str = "REPLY"
        else:
            opcode_str = "(unknown type)"
        return (
            f"opcode={opcode_str}"
            f", sender={format_ethernet_address(self.sender_ethernet_address)}"
            f"/{format_ipv4(self.sender_ip_address)}"
            f", target={format_ethernet_address(self.target_ethernet_address)}"
            f"/{format_ipv4(self.target_ip_address)}"
        )