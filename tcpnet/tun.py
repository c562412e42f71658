"""File descriptors for Linux TUN and TAP devices."""

from __future__ import annotations

import errno
import fcntl
import os
import struct

from .exceptions import UnixError
from .file_descriptor import FileDescriptor

CLONE_DEVICE = "/dev/net/tun"
IFNAMSIZ = 16
IFF_TUN = 0x0001
IFF_TAP = 0x0002
IFF_NO_PI = 0x1000
TUNSETIFF = 0x400454CA

_IFREQ = struct.Struct("16sh22x")


def _ifreq(devname: str, is_tun: bool) -> bytes:
    name = devname.encode()[: IFNAMSIZ - 1]
    flags = (IFF_TUN if is_tun else IFF_TAP) | IFF_NO_PI
    return _IFREQ.pack(name, flags)


class TunTapFD(FileDescriptor):
    """An open handle on an existing persistent TUN or TAP device."""

    def __init__(self, devname: str, is_tun: bool) -> None:
        try:
            fd = os.open(CLONE_DEVICE, os.O_RDWR | os.O_CLOEXEC)
        except OSError as exc:
            raise UnixError("open", exc.errno or errno.EIO) from exc
        super().__init__(fd)
        try:
            fcntl.ioctl(fd, TUNSETIFF, _ifreq(devname, is_tun))
        except OSError as exc:
            self.close()
            raise UnixError("ioctl", exc.errno or errno.EIO) from exc


class TunFD(TunTapFD):
    """A TUN device: reads and writes IP datagrams."""

    def __init__(self, devname: str) -> None:
        super().__init__(devname, True)


class TapFD(TunTapFD):
    """A TAP device: reads and writes Ethernet frames."""

    def __init__(self, devname: str) -> None:
        super().__init__(devname, False)