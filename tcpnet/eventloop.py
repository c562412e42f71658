"""An event loop that polls file descriptors and runs callbacks for ready ones."""

from __future__ import annotations

import errno
import os
import select
import socket
import sys
import weakref
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from .exceptions import UnixError
from .file_descriptor import FileDescriptor

Callback = Callable[[], None]
Interest = Callable[[], bool]

MAX_CATEGORIES = 64
_MAX_ITERATIONS = 128
_ERROR_EVENTS = select.POLLERR | select.POLLNVAL
_ALWAYS_REPORTED = select.POLLERR | select.POLLHUP | select.POLLNVAL


class Direction(Enum):
    """Whether a rule waits for its descriptor to be readable or writable."""

    IN = "in"
    OUT = "out"


class Result(Enum):
    """The outcome of one call to ``EventLoop.wait_next_event``."""

    SUCCESS = "success"  # a rule was served
    TIMEOUT = "timeout"  # nothing became ready before the timeout
    EXIT = "exit"  # no rule is left that could ever fire


def _always() -> bool:
    return True


def _nothing() -> None:
    return None


@dataclass(eq=False)
class _BasicRule:
    category_id: int
    interest: Interest
    callback: Callback
    cancel_requested: bool = False


@dataclass(eq=False)
class _FDRule(_BasicRule):
    fd: FileDescriptor = field(default=None)  # type: ignore[assignment]
    direction: Direction = Direction.IN
    on_cancel: Callback = _nothing
    on_error: Callback = _nothing

    def service_count(self) -> int:
        """How often the descriptor has been read or written, per the rule's direction."""
        if self.direction is Direction.IN:
            return self.fd.read_count()
        return self.fd.write_count()


class RuleHandle:
    """A weak handle through which a rule can be cancelled."""

    def __init__(self, rule: _BasicRule) -> None:
        self._rule = weakref.ref(rule)

    def cancel(self) -> None:
        """Ask the loop to drop the rule; its cancel callback is not called."""
        rule = self._rule()
        if rule is not None:
            rule.cancel_requested = True


def _socket_error(fd: int) -> Optional[int]:
    """Return the pending socket error on ``fd``, or None if it is not a socket."""
    try:
        sock = socket.socket(fileno=fd)
    except OSError as exc:
        if exc.errno == errno.ENOTSOCK:
            return None
        raise UnixError("getsockopt", exc.errno or errno.EIO) from exc
    try:
        return sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
    except OSError as exc:
        if exc.errno == errno.ENOTSOCK:
            return None
        raise UnixError("getsockopt", exc.errno or errno.EIO) from exc
    finally:
        sock.detach()


class EventLoop:
    """Runs callbacks for interested rules, one rule per call to ``wait_next_event``."""

    def __init__(self) -> None:
        self._categories: list[str] = []
        self._fd_rules: list[_FDRule] = []
        self._non_fd_rules: list[_BasicRule] = []

    def add_category(self, name: str) -> int:
        """Register a rule category and return its id."""
        if len(self._categories) >= MAX_CATEGORIES:
            raise RuntimeError("maximum categories reached")
        self._categories.append(name)
        return len(self._categories) - 1

    def _category_id(self, category: Union[int, str]) -> int:
        if isinstance(category, str):
            return self.add_category(category)
        if not 0 <= category < len(self._categories):
            raise IndexError("bad category_id")
        return category

    def add_rule(
        self,
        category: Union[int, str],
        callback: Callback,
        interest: Optional[Interest] = None,
    ) -> RuleHandle:
        """Add a rule that fires whenever ``interest()`` is true.

        ``category`` is a category id, or a name for a new category.
        """
        rule = _BasicRule(self._category_id(category), interest or _always, callback)
        self._non_fd_rules.append(rule)
        return RuleHandle(rule)

    def add_fd_rule(
        self,
        category: Union[int, str],
        fd: FileDescriptor,
        direction: Direction,
        callback: Callback,
        interest: Optional[Interest] = None,
        cancel: Optional[Callback] = None,
        error: Optional[Callback] = None,
    ) -> RuleHandle:
        """Add a rule that fires when ``fd`` is ready in ``direction`` and ``interest()`` holds.

        ``cancel`` runs when the loop drops the rule (EOF, hangup, close, error);
        ``error`` runs first when the descriptor reports an error.
        """
        rule = _FDRule(
            self._category_id(category),
            interest or _always,
            callback,
            fd=fd.duplicate(),
            direction=direction,
            on_cancel=cancel or _nothing,
            on_error=error or _nothing,
        )
        self._fd_rules.append(rule)
        return RuleHandle(rule)

    def _name(self, rule: _BasicRule) -> str:
        return self._categories[rule.category_id]

    def _serve_non_fd_rules(self) -> bool:
        for rule in list(self._non_fd_rules):
            if rule.cancel_requested:
                self._non_fd_rules.remove(rule)
                continue
            iterations = 0
            fired = False
            while rule.interest():
                iterations += 1
                if iterations > _MAX_ITERATIONS:
                    raise RuntimeError(
                        f'EventLoop: busy wait detected: rule "{self._name(rule)}" '
                        f"is still interested after {iterations} iterations"
                    )
                fired = True
                rule.callback()
            if fired:
                return True
        return False

    def _report_error(self, rule: _FDRule) -> None:
        socket_error = _socket_error(rule.fd.fd_num())
        if socket_error is None:
            print(
                f'error on polled file descriptor for rule "{self._name(rule)}"',
                file=sys.stderr,
            )
        elif socket_error:
            print(
                f'error on polled socket for rule "{self._name(rule)}": {os.strerror(socket_error)}',
                file=sys.stderr,
            )

    def wait_next_event(self, timeout_ms: int) -> Result:
        """Serve at most one rule, waiting up to ``timeout_ms`` (negative: forever)."""
        if self._serve_non_fd_rules():
            return Result.SUCCESS

        polled: list[tuple[_FDRule, int]] = []
        for rule in list(self._fd_rules):
            if rule.cancel_requested:
                self._fd_rules.remove(rule)
                continue
            if (rule.direction is Direction.IN and rule.fd.eof()) or rule.fd.closed():
                rule.on_cancel()
                self._fd_rules.remove(rule)
                continue
            if rule.interest():
                events = select.POLLIN if rule.direction is Direction.IN else select.POLLOUT
            else:
                events = 0  # still registered so that errors are seen
            polled.append((rule, events))

        if not any(events for _rule, events in polled):
            return Result.EXIT

        poller = select.poll()
        combined: dict[int, int] = {}
        for rule, events in polled:
            fd = rule.fd.fd_num()
            combined[fd] = combined.get(fd, 0) | events
        for fd, events in combined.items():
            poller.register(fd, events)

        try:
            ready = poller.poll(timeout_ms)
        except OSError as exc:
            raise UnixError("poll", exc.errno or errno.EIO) from exc
        if not ready:
            return Result.TIMEOUT
        revents_by_fd = dict(ready)

        for rule, events in polled:
            revents = revents_by_fd.get(rule.fd.fd_num(), 0) & (events | _ALWAYS_REPORTED)

            if revents & _ERROR_EVENTS:
                self._report_error(rule)
                rule.on_error()
                rule.on_cancel()
                self._fd_rules.remove(rule)
                continue

            poll_ready = bool(revents & events)
            poll_hup = bool(revents & select.POLLHUP)
            if poll_hup and ((events and not poll_ready) or rule.direction is Direction.OUT):
                rule.on_cancel()
                self._fd_rules.remove(rule)
                continue

            if poll_ready:
                count_before = rule.service_count()
                rule.callback()
                if count_before == rule.service_count() and not rule.fd.closed() and rule.interest():
                    raise RuntimeError(
                        f'EventLoop: busy wait detected: rule "{self._name(rule)}" '
                        "did not read/write fd and is still interested"
                    )
                return Result.SUCCESS

        return Result.SUCCESS