"""Socket addresses with name resolution."""

from __future__ import annotations

import ipaddress
import socket
from typing import Any

from .exceptions import TaggedError

_INET_FAMILIES = (socket.AF_INET, socket.AF_INET6)


def _lookup(node: str, service: str, flags: int) -> tuple[int, Any]:
    try:
        results = socket.getaddrinfo(node, service, socket.AF_INET, 0, 0, flags)
    except socket.gaierror as exc:
        raise TaggedError(f"getaddrinfo({node}, {service})", exc.errno, exc.strerror) from exc
    if not results:
        raise RuntimeError("getaddrinfo returned successfully but with no results")
    family, _type, _proto, _canonname, sockaddr = results[0]
    return family, sockaddr


class Address:
    """An IPv4 (or other family) socket address."""

    __slots__ = ("family", "_sockaddr")

    def __init__(self, ip: str, port: int = 0) -> None:
        """Build from a dotted-quad string and numeric port, without resolving names."""
        if not 0 <= port <= 0xFFFF:
            raise ValueError(f"port out of range: {port}")
        self.family, self._sockaddr = _lookup(
            ip, str(port), socket.AI_NUMERICHOST | socket.AI_NUMERICSERV
        )

    @classmethod
    def _create(cls, family: int, sockaddr: Any) -> Address:
        obj = cls.__new__(cls)
        obj.family = family
        obj._sockaddr = tuple(sockaddr) if isinstance(sockaddr, list) else sockaddr
        return obj

    @classmethod
    def resolve(cls, hostname: str, service: str) -> Address:
        """Resolve a host name and service name (e.g. "http") to an IPv4 address."""
        family, sockaddr = _lookup(hostname, service, getattr(socket, "AI_ALL", 0))
        return cls._create(family, sockaddr)

    @classmethod
    def from_sockaddr(cls, family: int, sockaddr: Any) -> Address:
        """Wrap a socket-module address of the given family."""
        return cls._create(family, sockaddr)

    @classmethod
    def from_ipv4_numeric(cls, value: int) -> Address:
        """Build an IPv4 address (port 0) from its 32-bit numeric form."""
        return cls._create(socket.AF_INET, (str(ipaddress.IPv4Address(value)), 0))

    def ip_port(self) -> tuple[str, int]:
        """Return the numeric host string and port."""
        if self.family not in _INET_FAMILIES:
            raise RuntimeError("Address.ip_port() called on non-Internet address")
        try:
            host, service = socket.getnameinfo(
                self._sockaddr, socket.NI_NUMERICHOST | socket.NI_NUMERICSERV
            )
        except socket.gaierror as exc:
            raise TaggedError("getnameinfo", exc.errno, exc.strerror) from exc
        return host, int(service)

    def ip(self) -> str:
        return self.ip_port()[0]

    def port(self) -> int:
        return self.ip_port()[1]

    def ipv4_numeric(self) -> int:
        """Return the IPv4 address as an integer in host byte order."""
        if self.family != socket.AF_INET:
            raise RuntimeError("ipv4_numeric called on non-IPV4 address")
        return int(ipaddress.IPv4Address(self._sockaddr[0]))

    def sockaddr(self) -> Any:
        """Return the address in the form the socket module expects."""
        return self._sockaddr

    def __str__(self) -> str:
        if self.family in _INET_FAMILIES:
            host, port = self.ip_port()
            return f"{host}:{port}"
        return "(non-Internet address)"

    def __repr__(self) -> str:
        return f"<Address {self}>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return (self.family, self._sockaddr) == (other.family, other._sockaddr)

    def __hash__(self) -> int:
        return hash((self.family, self._sockaddr))