import pytest

from tcpnet.ethernet import (
    ETHERNET_BROADCAST,
    EthernetFrame,
    EthernetHeader,
    format_ethernet_address,
)
from tcpnet.parser import Parser, Serializer


def _wire(obj):
    serializer = Serializer()
    obj.serialize(serializer)
    return b"".join(serializer.finish())


def _header():
    return EthernetHeader(
        dst=ETHERNET_BROADCAST,
        src=bytes([0x02, 0x00, 0x00, 0x00, 0x00, 0x01]),
        type=EthernetHeader.TYPE_ARP,
    )


def test_format_broadcast():
    assert format_ethernet_address(ETHERNET_BROADCAST) == "ff:ff:ff:ff:ff:ff"


def test_format_pads_each_byte():
    assert format_ethernet_address(bytes([1, 2, 3, 10, 11, 12])) == "01:02:03:0a:0b:0c"


def test_header_round_trip():
    header = _header()
    raw = _wire(header)
    assert len(raw) == EthernetHeader.LENGTH
    parser = Parser([raw])
    parsed = EthernetHeader.parse(parser)
    assert not parser.has_error()
    assert parsed == header


def test_header_wire_layout():
    raw = _wire(_header())
    assert raw[:6] == ETHERNET_BROADCAST
    assert raw[6:12] == bytes([0x02, 0x00, 0x00, 0x00, 0x00, 0x01])
    assert int.from_bytes(raw[12:14], "big") == EthernetHeader.TYPE_ARP


def test_header_parse_short_input_sets_error():
    parser = Parser([bytes(EthernetHeader.LENGTH - 1)])
    EthernetHeader.parse(parser)
    assert parser.has_error()


def test_header_str_known_types():
    header = _header()
    assert str(header).endswith("type=ARP")
    header.type = EthernetHeader.TYPE_IPv4
    assert str(header).endswith("type=IPv4")
    assert str(header).startswith("dst=" + format_ethernet_address(ETHERNET_BROADCAST))


def test_header_str_unknown_type():
    header = _header()
    header.type = 0x1234
    assert str(header).endswith("type=[unknown type 1234!]")


def test_serialize_rejects_bad_address_length():
    header = _header()
    header.src = b"\x01\x02"
    with pytest.raises(ValueError):
        _wire(header)


def test_frame_round_trip():
    frame = EthernetFrame(header=_header(), payload=[b"hello ", b"world"])
    raw = _wire(frame)
    parser = Parser([raw])
    parsed = EthernetFrame.parse(parser)
    assert not parser.has_error()
    assert parsed.header == frame.header
    assert b"".join(parsed.payload) == b"hello world"


def test_frame_split_buffers_parse():
    raw = _wire(EthernetFrame(header=_header(), payload=[b"xyz"]))
    parser = Parser([raw[:5], raw[5:13], raw[13:]])
    parsed = EthernetFrame.parse(parser)
    assert not parser.has_error()
    assert parsed.header == _header()
    assert b"".join(parsed.payload) == b"xyz"