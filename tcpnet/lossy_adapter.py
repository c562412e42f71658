"""An adapter wrapper that randomly drops reads and writes."""

from __future__ import annotations

import random
from typing import Any, Optional

from .file_descriptor import FileDescriptor
from .rng import get_random_engine
from .tcp_config import FdAdapterConfig
from .tcp_message import TCPMessage


class LossyFdAdapter:
    """Passes reads and writes through to another adapter, dropping some at random.

    The loss rates in the adapter's configuration are out of 65536.
    """

    def __init__(self, adapter: Any, rng: Optional[random.Random] = None) -> None:
        self._adapter = adapter
        self._rng = rng if rng is not None else get_random_engine()

    def _should_drop(self, uplink: bool) -> bool:
        cfg = self._adapter.config()
        loss = cfg.loss_rate_up if uplink else cfg.loss_rate_dn
        return loss != 0 and self._rng.getrandbits(16) < loss

    def fd(self) -> FileDescriptor:
        return self._adapter.fd()

    def read(self) -> Optional[TCPMessage]:
        """Read from the wrapped adapter; None if it gave nothing or the message was dropped."""
        message = self._adapter.read()
        if self._should_drop(False):
            return None
        return message

    def write(self, message: TCPMessage) -> None:
        """Write through the wrapped adapter unless the message is dropped."""
        if self._should_drop(True):
            return
        self._adapter.write(message)

    def set_listening(self, listening: bool) -> None:
        self._adapter.set_listening(listening)

    def config(self) -> FdAdapterConfig:
        return self._adapter.config()

    def tick(self, ms_since_last_tick: int) -> None:
        self._adapter.tick(ms_since_last_tick)