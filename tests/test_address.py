import socket

import pytest

from tcpnet.address import Address
from tcpnet.exceptions import TaggedError


def test_numeric_address_fields():
    addr = Address("18.243.0.1", 80)
    assert addr.ip() == "18.243.0.1"
    assert addr.port() == 80
    assert addr.ip_port() == ("18.243.0.1", 80)
    assert str(addr) == "18.243.0.1:80"


def test_default_port_is_zero():
    assert Address("10.0.0.1").port() == 0


def test_zero_means_any_address():
    assert Address("0", 0).ip() == "0.0.0.0"


def test_ipv4_numeric_value():
    assert Address("1.2.3.4").ipv4_numeric() == 0x01020304


def test_numeric_round_trip():
    addr = Address("171.67.76.46")
    again = Address.from_ipv4_numeric(addr.ipv4_numeric())
    assert again == addr
    assert again.ip() == "171.67.76.46"


def test_from_ipv4_numeric_out_of_range():
    with pytest.raises(ValueError):
        Address.from_ipv4_numeric(1 << 32)


def test_invalid_ip_raises_tagged_error():
    with pytest.raises(TaggedError) as info:
        Address("not-an-ip", 0)
    assert str(info.value).startswith("getaddrinfo(not-an-ip, 0): ")


def test_port_out_of_range():
    with pytest.raises(ValueError):
        Address("1.1.1.1", 70000)


def test_resolve_numeric_host_and_service():
    addr = Address.resolve("127.0.0.1", "80")
    assert addr.ip_port() == ("127.0.0.1", 80)
    assert addr == Address("127.0.0.1", 80)


def test_resolve_unknown_service():
    with pytest.raises(TaggedError):
        Address.resolve("127.0.0.1", "no-such-service-xyz")


def test_sockaddr_matches_socket_module_form():
    addr = Address("10.0.0.1", 7)
    assert addr.sockaddr() == ("10.0.0.1", 7)
    assert addr.family == socket.AF_INET


def test_non_internet_address():
    addr = Address.from_sockaddr(socket.AF_UNIX, "/tmp/example.sock")
    assert str(addr) == "(non-Internet address)"
    with pytest.raises(RuntimeError):
        addr.ip_port()
    with pytest.raises(RuntimeError):
        addr.ipv4_numeric()


def test_ipv6_address():
    addr = Address.from_sockaddr(socket.AF_INET6, ("::1", 53, 0, 0))
    assert addr.ip_port() == ("::1", 53)
    with pytest.raises(RuntimeError):
        addr.ipv4_numeric()


def test_equality_and_hash():
    first = Address("1.1.1.1", 5)
    second = Address("1.1.1.1", 5)
    other = Address("1.1.1.1", 6)
    assert first == second
    assert not first == other
    assert len({first, second, other}) == 2