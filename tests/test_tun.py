import errno
import os
import struct
from unittest import mock

import pytest

from tcpnet.exceptions import UnixError
from tcpnet.tun import (
    CLONE_DEVICE,
    IFF_NO_PI,
    IFF_TAP,
    IFF_TUN,
    IFNAMSIZ,
    TUNSETIFF,
    TapFD,
    TunFD,
)


@pytest.fixture
def pipe_fds():
    read_end, write_end = os.pipe()
    yield read_end
    os.close(write_end)


def _open_with(fd, ioctl_side_effect=None):
    ioctl = mock.MagicMock(side_effect=ioctl_side_effect)
    opener = mock.MagicMock(return_value=fd)
    return opener, ioctl


def test_tun_device_is_configured(pipe_fds):
    opener, ioctl = _open_with(pipe_fds)
    with mock.patch("tcpnet.tun.os.open", opener), mock.patch("tcpnet.tun.fcntl.ioctl", ioctl):
        dev = TunFD("tun144")
    with dev:
        assert dev.fd_num() == pipe_fds
        assert opener.call_args.args[0] == CLONE_DEVICE
        fd_arg, request, ifreq = ioctl.call_args.args
        assert fd_arg == pipe_fds
        assert request == TUNSETIFF
        assert ifreq[:IFNAMSIZ].rstrip(b"\0") == b"tun144"
        (flags,) = struct.unpack_from("h", ifreq, IFNAMSIZ)
        assert flags == IFF_TUN | IFF_NO_PI


def test_tap_device_uses_tap_flag(pipe_fds):
    opener, ioctl = _open_with(pipe_fds)
    with mock.patch("tcpnet.tun.os.open", opener), mock.patch("tcpnet.tun.fcntl.ioctl", ioctl):
        dev = TapFD("tap0")
    with dev:
        assert dev.fd_num() == pipe_fds
        assert not dev.closed()
        fd_arg, request, ifreq = ioctl.call_args.args
        assert fd_arg == dev.fd_num()
        assert request == TUNSETIFF
        assert ifreq[:IFNAMSIZ].rstrip(b"\0") == b"tap0"
        (flags,) = struct.unpack_from("h", ifreq, IFNAMSIZ)
        assert flags == IFF_TAP | IFF_NO_PI
        assert not flags & IFF_TUN


def test_long_device_name_is_truncated_and_terminated(pipe_fds):
    opener, ioctl = _open_with(pipe_fds)
    long_name = "a" * 40
    with mock.patch("tcpnet.tun.os.open", opener), mock.patch("tcpnet.tun.fcntl.ioctl", ioctl):
        dev = TunFD(long_name)
    with dev:
        name_field = ioctl.call_args.args[2][:IFNAMSIZ]
        assert name_field[: IFNAMSIZ - 1] == long_name[: IFNAMSIZ - 1].encode()
        assert name_field[IFNAMSIZ - 1] == 0


def test_open_failure_raises_unix_error():
    opener = mock.MagicMock(side_effect=OSError(errno.ENOENT, "No such file"))
    with mock.patch("tcpnet.tun.os.open", opener):
        with pytest.raises(UnixError) as info:
            TunFD("tun144")
    assert info.value.attempt == "open"
    assert info.value.error_code == errno.ENOENT


def test_ioctl_failure_closes_descriptor():
    read_end, write_end = os.pipe()
    try:
        opener, ioctl = _open_with(read_end, OSError(errno.EPERM, "Operation not permitted"))
        with mock.patch("tcpnet.tun.os.open", opener), mock.patch("tcpnet.tun.fcntl.ioctl", ioctl):
            with pytest.raises(UnixError) as info:
                TunFD("tun144")
        assert info.value.attempt == "ioctl"
        assert info.value.error_code == errno.EPERM
        with pytest.raises(OSError):
            os.fstat(read_end)
    finally:
        os.close(write_end)


def test_tun_descriptor_reads_like_file_descriptor():
    read_end, write_end = os.pipe()
    try:
        opener, ioctl = _open_with(read_end)
        with mock.patch("tcpnet.tun.os.open", opener), mock.patch("tcpnet.tun.fcntl.ioctl", ioctl):
            dev = TunFD("tun144")
        with dev:
            os.write(write_end, b"datagram")
            assert dev.read() == b"datagram"
            assert dev.read_count() == 1
    finally:
        os.close(write_end)