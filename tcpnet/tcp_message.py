"""The messages exchanged between TCP senders and receivers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class TCPSenderMessage:
    """What a TCP sender tells its peer's receiver.

    ``seqno`` is the raw 32-bit sequence number of the first sequence number
    the message occupies (the SYN if set, otherwise the first payload byte).
    """

    seqno: int = 0
    syn: bool = False
    payload: bytes = b""
    fin: bool = False
    rst: bool = False

    def sequence_length(self) -> int:
        """How many sequence numbers this message occupies."""
        return int(self.syn) + len(self.payload) + int(self.fin)


@dataclass
class TCPReceiverMessage:
    """What a TCP receiver tells its peer's sender.

    ``ackno`` is the raw 32-bit next needed sequence number, or None before
    the initial sequence number has been received.
    """

    ackno: Optional[int] = None
    window_size: int = 0
    rst: bool = False


@dataclass
class UserDatagramInfo:
    """Ports and checksum: the UDP-like part of a TCP header."""

    src_port: int = 0
    dst_port: int = 0
    cksum: int = 0


@dataclass
class TCPMessage:
    """A sender message together with a receiver message."""

    sender: TCPSenderMessage = field(default_factory=TCPSenderMessage)
    receiver: TCPReceiverMessage = field(default_factory=TCPReceiverMessage)