"""Debug output that goes to a replaceable handler (stderr by default)."""

from __future__ import annotations

import sys
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

DebugHandler = Callable[[str], None]


def _default_handler(message: str) -> None:
    print(f"DEBUG: {message}", file=sys.stderr)


@dataclass
class _DebugRoute:
    """Where debug messages currently go."""

    handler: DebugHandler = _default_handler


_route = _DebugRoute()


def debug_str(message: str) -> None:
    """Send a message to the current debug handler."""
    _route.handler(message)


def debug(fmt: str, *args: Any, **kwargs: Any) -> None:
    """Format a message with ``str.format`` and emit it, unless running optimised."""
    if __debug__:
        debug_str(fmt.format(*args, **kwargs))


def set_debug_handler(handler: DebugHandler) -> None:
    """Route debug messages to ``handler``."""
    if not callable(handler):
        raise TypeError("debug handler must be callable")
    _route.handler = handler


def reset_debug_handler() -> None:
    """Route debug messages back to stderr."""
    _route.handler = _default_handler