"""Delivery of interrupt (Ctrl-C) events to a test run."""

from __future__ import annotations

import enum
import queue
import signal
import threading
from typing import Any, Optional

_install_lock = threading.Lock()
_installed = False


class SignalEvent(enum.Enum):
    """A signal received by the process."""

    INTERRUPTED = "interrupted"


class SignalHandlerError(RuntimeError):
    """Raised when an interrupt handler is already installed in this process."""


class SignalHandler:
    """A source of signal events, either fed by SIGINT or one that never yields anything.

    Create one with `install()` or `noop()`. An installed handler can be closed, which
    restores the previous SIGINT handler; it is also a context manager.
    """

    __slots__ = ("_events", "_previous", "_active")

    def __init__(self, events: Optional["queue.SimpleQueue[SignalEvent]"], previous: Any) -> None:
        self._events = events
        self._previous = previous
        self._active = events is not None

    @classmethod
    def install(cls) -> "SignalHandler":
        """Install a SIGINT handler that produces `SignalEvent.INTERRUPTED`.

        Only one such handler may be installed in a process at a time.
        """
        global _installed
        with _install_lock:
            if _installed:
                raise SignalHandlerError("an interrupt handler is already installed")
            events: "queue.SimpleQueue[SignalEvent]" = queue.SimpleQueue()

            def _on_interrupt(signum: int, frame: Any) -> None:
                events.put(SignalEvent.INTERRUPTED)

            previous = signal.signal(signal.SIGINT, _on_interrupt)
            _installed = True
        return cls(events, previous)

    @classmethod
    def noop(cls) -> "SignalHandler":
        """Create a handler that never produces events."""
        return cls(None, None)

    def receive(self, timeout: Optional[float] = None) -> Optional[SignalEvent]:
        """Wait for the next event, returning None on timeout.

        A no-op handler has no events to wait for and returns None at once.
        """
        if self._events is None:
            return None
        try:
            return self._events.get(timeout=timeout)
        except queue.Empty:
            return None

    def close(self) -> None:
        """Restore the SIGINT handler that was in place before installation."""
        global _installed
        with _install_lock:
            if not self._active:
                return
            previous = self._previous if self._previous is not None else signal.SIG_DFL
            signal.signal(signal.SIGINT, previous)
            self._active = False
            _installed = False

    def __enter__(self) -> "SignalHandler":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()