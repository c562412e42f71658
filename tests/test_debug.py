import pytest

from tcpnet.debug import debug, debug_str, reset_debug_handler, set_debug_handler


@pytest.fixture(autouse=True)
def _restore_handler():
    yield
    reset_debug_handler()


def test_debug_formats_and_routes_to_handler():
    received = []
    set_debug_handler(received.append)
    debug("x={} y={name}", 3, name="z")
    assert received == ["x=3 y=z"]


def test_debug_str_passes_message_verbatim():
    received = []
    set_debug_handler(received.append)
    debug_str("{raw}")
    assert received == ["{raw}"]


def test_default_handler_writes_stderr(capsys):
    debug_str("hello")
    assert capsys.readouterr().err == "DEBUG: hello\n"


def test_reset_restores_default(capsys):
    received = []
    set_debug_handler(received.append)
    reset_debug_handler()
    debug_str("after")
    assert received == []
    assert capsys.readouterr().err == "DEBUG: after\n"