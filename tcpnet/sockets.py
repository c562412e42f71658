"""Network sockets (UDP, TCP, packet and Unix-domain) on top of FileDescriptor."""

from __future__ import annotations

import errno
import socket
import struct
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Optional, TypeVar

from .address import Address
from .exceptions import UnixError
from .file_descriptor import FileDescriptor

T = TypeVar("T")
S = TypeVar("S", bound="Socket")

SOL_PACKET = 263
PACKET_ADD_MEMBERSHIP = 1
PACKET_MR_PROMISC = 1
_PACKET_MREQ = struct.Struct("iHH8s")


def _open_socket(domain: int, type_: int, protocol: int) -> int:
    """Create a socket and return its descriptor number."""
    try:
        sock = socket.socket(domain, type_, protocol)
    except OSError as exc:
        raise UnixError("socket", exc.errno or errno.EIO) from exc
    return sock.detach()


class Socket(FileDescriptor):
    """Base class for network sockets; normally used through a subclass."""

    @classmethod
    def _adopt(cls: type[S], fd: FileDescriptor, domain: int, type_: int, protocol: int = 0) -> S:
        obj = cls.__new__(cls)
        obj._attach(fd, domain, type_, protocol)
        return obj

    def _attach(self, fd: FileDescriptor, domain: int, type_: int, protocol: int) -> None:
        """Take over ``fd``, checking that it is a socket of the expected kind."""
        self._wrapper = fd._wrapper
        checks = (
            (socket.SO_DOMAIN, domain, "socket domain mismatch"),
            (socket.SO_TYPE, type_, "socket type mismatch"),
            (socket.SO_PROTOCOL, protocol, "socket protocol mismatch"),
        )
        for option, expected, message in checks:
            actual = self._syscall(
                "getsockopt", lambda sock, opt=option: sock.getsockopt(socket.SOL_SOCKET, opt)
            )
            if actual != expected:
                raise RuntimeError(message)

    @contextmanager
    def _borrowed(self) -> Iterator[socket.socket]:
        sock = socket.socket(fileno=self.fd_num())
        try:
            yield sock
        finally:
            sock.detach()

    def _syscall(self, attempt: str, operation: Callable[[socket.socket], T]) -> Optional[T]:
        """Run ``operation`` on the socket; would-block on a non-blocking socket yields None."""
        try:
            with self._borrowed() as sock:
                return operation(sock)
        except OSError as exc:
            if self._wrapper.would_block(exc):
                return None
            raise UnixError(attempt, exc.errno or errno.EIO) from exc

    def _address(self, attempt: str, getter: Callable[[socket.socket], object]) -> Address:
        def operation(sock: socket.socket) -> tuple[int, object]:
            return sock.family, getter(sock)

        result = self._syscall(attempt, operation)
        if result is None:
            raise UnixError(attempt, errno.EAGAIN)
        family, sockaddr = result
        return Address.from_sockaddr(family, sockaddr)

    def bind(self, address: Address) -> None:
        """Bind to a local address, usually before listen/accept."""
        self._syscall("bind", lambda sock: sock.bind(address.sockaddr()))

    def bind_to_device(self, device_name: str) -> None:
        """Bind to a network device by name."""
        self._syscall(
            "setsockopt",
            lambda sock: sock.setsockopt(
                socket.SOL_SOCKET, socket.SO_BINDTODEVICE, device_name.encode()
            ),
        )

    def connect(self, address: Address) -> None:
        """Connect to a peer address."""
        self._syscall("connect", lambda sock: sock.connect(address.sockaddr()))

    def shutdown(self, how: int) -> None:
        """Shut down reading (SHUT_RD), writing (SHUT_WR) or both (SHUT_RDWR)."""
        self._syscall("shutdown", lambda sock: sock.shutdown(how))
        if how == socket.SHUT_RD:
            self._register_read()
        elif how == socket.SHUT_WR:
            self._register_write()
        elif how == socket.SHUT_RDWR:
            self._register_read()
            self._register_write()
        else:
            raise RuntimeError("Socket.shutdown() called with invalid `how`")

    def local_address(self) -> Address:
        return self._address("getsockname", lambda sock: sock.getsockname())

    def peer_address(self) -> Address:
        return self._address("getpeername", lambda sock: sock.getpeername())

    def set_reuseaddr(self) -> None:
        """Allow the local address to be reused sooner (SO_REUSEADDR)."""
        self._syscall(
            "setsockopt", lambda sock: sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        )

    def throw_if_error(self) -> None:
        """Raise UnixError if the socket has a pending error."""
        socket_error = self._syscall(
            "getsockopt", lambda sock: sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
        )
        if socket_error:
            raise UnixError("socket error", socket_error)


class DatagramSocket(Socket):
    """A socket that sends and receives whole datagrams."""

    def recv(self) -> tuple[Address, bytes]:
        """Receive one datagram; return its sender's address and its payload."""
        buffer = bytearray(self.READ_BUFFER_SIZE)

        def operation(sock: socket.socket) -> tuple[int, object, int]:
            length, sockaddr = sock.recvfrom_into(buffer, 0, socket.MSG_TRUNC)
            return length, sockaddr, sock.family

        result = self._syscall("recvfrom", operation)
        if result is None:
            self._register_read()
            return Address.from_sockaddr(socket.AF_UNSPEC, None), b""
        length, sockaddr, family = result
        if length > len(buffer):
            raise RuntimeError("recvfrom (oversized datagram)")
        self._register_read()
        return Address.from_sockaddr(family, sockaddr), bytes(buffer[:length])

    def sendto(self, destination: Address, payload: bytes) -> None:
        """Send a datagram to ``destination``."""
        self._syscall("sendto", lambda sock: sock.sendto(payload, destination.sockaddr()))
        self._register_write()

    def send(self, payload: bytes) -> None:
        """Send a datagram to the connected peer."""
        self._syscall("send", lambda sock: sock.send(payload))
        self._register_write()


class UDPSocket(DatagramSocket):
    """An unbound, unconnected UDP socket."""

    def __init__(self) -> None:
        super().__init__(_open_socket(socket.AF_INET, socket.SOCK_DGRAM, 0))


class TCPSocket(Socket):
    """An unbound, unconnected TCP socket."""

    def __init__(self) -> None:
        super().__init__(_open_socket(socket.AF_INET, socket.SOCK_STREAM, 0))

    def listen(self, backlog: int = 16) -> None:
        """Mark the socket as accepting connections."""
        self._syscall("listen", lambda sock: sock.listen(backlog))

    def accept(self) -> TCPSocket:
        """Wait for and return a new connection."""
        self._register_read()
        try:
            with self._borrowed() as sock:
                conn, _peer = sock.accept()
        except OSError as exc:
            raise UnixError("accept", exc.errno or errno.EIO) from exc
        fd = FileDescriptor(conn.detach())
        return TCPSocket._adopt(fd, socket.AF_INET, socket.SOCK_STREAM, socket.IPPROTO_TCP)


class PacketSocket(DatagramSocket):
    """A link-layer packet socket."""

    def __init__(self, type: int, protocol: int) -> None:  # noqa: A002
        super().__init__(_open_socket(socket.AF_PACKET, type, protocol))

    def set_promiscuous(self) -> None:
        """Put the bound interface into promiscuous mode."""
        local = self.local_address()
        if local.family != socket.AF_PACKET:
            raise RuntimeError("Address::as() conversion failure")
        ifindex = socket.if_nametoindex(local.sockaddr()[0])
        request = _PACKET_MREQ.pack(ifindex, PACKET_MR_PROMISC, 0, b"")
        self._syscall(
            "setsockopt",
            lambda sock: sock.setsockopt(SOL_PACKET, PACKET_ADD_MEMBERSHIP, request),
        )


class LocalStreamSocket(Socket):
    """A Unix-domain stream socket wrapping an existing descriptor."""

    def __init__(self, fd: FileDescriptor) -> None:
        self._attach(fd, socket.AF_UNIX, socket.SOCK_STREAM, 0)


class LocalDatagramSocket(DatagramSocket):
    """An unbound, unconnected Unix-domain datagram socket."""

    def __init__(self) -> None:
        super().__init__(_open_socket(socket.AF_UNIX, socket.SOCK_DGRAM, 0))