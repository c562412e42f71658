import pytest

from tcpnet.parser import Parser, Serializer


def test_integer_spans_buffers():
    parser = Parser([b"\x12", b"\x34\x56"])
    assert parser.integer(2) == 0x1234
    assert parser.integer(1) == 0x56
    assert not parser.has_error()


def test_integer_past_end_sets_error():
    parser = Parser([b"\x01"])
    assert parser.integer(2) == 0
    assert parser.has_error()


def test_error_is_sticky():
    parser = Parser([b"\x01\x02"])
    parser.set_error()
    assert parser.integer(1) == 0
    assert parser.has_error()


@pytest.mark.parametrize(
    "size,value",
    [(1, 0xAB), (2, 0xBEEF), (4, 0xDEADBEEF), (8, 0x0123456789ABCDEF)],
)
def test_integer_round_trip(size, value):
    serializer = Serializer()
    serializer.integer(value, size)
    out = serializer.finish()
    assert len(b"".join(out)) == size
    parser = Parser(out)
    assert parser.integer(size) == value
    assert not parser.has_error()


def test_serializer_is_big_endian():
    serializer = Serializer()
    serializer.integer(0x0102, 2)
    assert serializer.finish() == [b"\x01\x02"]


def test_serializer_truncates_to_width():
    serializer = Serializer()
    serializer.integer(0x1FF, 1)
    assert serializer.finish() == [b"\xff"]


def test_serializer_flushes_around_buffers():
    serializer = Serializer()
    serializer.integer(1, 1)
    serializer.buffer(b"xy")
    serializer.buffer(b"")
    serializer.integer(2, 1)
    assert serializer.finish() == [b"\x01", b"xy", b"\x02"]


def test_serializer_buffer_list_skips_empty():
    serializer = Serializer()
    serializer.buffer([b"ab", b"", bytearray(b"cd")])
    assert serializer.finish() == [b"ab", b"cd"]


def test_serializer_finish_resets():
    serializer = Serializer()
    serializer.buffer(b"ab")
    assert serializer.finish() == [b"ab"]
    assert serializer.finish() == []


def test_serializer_rejects_str():
    with pytest.raises(TypeError):
        Serializer().buffer("text")


def test_remove_prefix_across_buffers():
    parser = Parser([b"abc", b"def"])
    parser.remove_prefix(4)
    assert parser.all_remaining() == [b"ef"]


def test_remove_prefix_beyond_end():
    parser = Parser([b"abc"])
    parser.remove_prefix(10)
    assert parser.concatenate_all_remaining() == b""
    parser.integer(1)
    assert parser.has_error()


@pytest.mark.parametrize(
    "length,expected",
    [
        (4, [b"abc", b"d"]),
        (3, [b"abc"]),
        (0, []),
        (10, [b"abc", b"def"]),
    ],
)
def test_truncate(length, expected):
    parser = Parser([b"abc", b"def"])
    parser.truncate(length)
    assert parser.all_remaining() == expected


def test_truncate_after_partial_read():
    parser = Parser([b"abcdef"])
    parser.remove_prefix(1)
    parser.truncate(3)
    assert parser.concatenate_all_remaining() == b"bcd"


def test_buffer_does_not_consume():
    parser = Parser([b"abc", b"def"])
    parser.remove_prefix(1)
    assert parser.buffer() == [b"bc", b"def"]
    assert parser.concatenate_all_remaining() == b"bcdef"


def test_string_reads_across_buffers():
    parser = Parser([b"ab", b"cd", b"ef"])
    assert parser.string(5) == b"abcde"
    assert parser.concatenate_all_remaining() == b"f"


def test_string_too_long_sets_error():
    parser = Parser([b"abc"])
    parser.string(4)
    assert parser.has_error()


def test_single_bytes_input():
    parser = Parser(b"\x00\x07")
    assert parser.integer(2) == 7


def test_all_remaining_empties_parser():
    parser = Parser([b"ab", b"cd"])
    assert parser.all_remaining() == [b"ab", b"cd"]
    assert parser.all_remaining() == []
    assert parser.buffer() == []