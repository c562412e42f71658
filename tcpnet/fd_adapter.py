"""Shared state for adapters that carry TCP over a file descriptor."""

from __future__ import annotations

from .tcp_config import FdAdapterConfig


class FdAdapterBase:
    """Holds an adapter's configuration and whether it is listening."""

    def __init__(self) -> None:
        self._config = FdAdapterConfig()
        self._listening = False

    def set_listening(self, listening: bool) -> None:
        self._listening = listening

    def listening(self) -> bool:
        """Is the connected TCP peer waiting for a new connection?"""
        return self._listening

    def config(self) -> FdAdapterConfig:
        """Return the (mutable) configuration."""
        return self._config

    def tick(self, ms_since_last_tick: int) -> None:
        """Called periodically as time passes; the base adapter has nothing to do."""