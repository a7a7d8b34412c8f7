"""Catching of termination signals while the updater sleeps."""

from __future__ import annotations

import queue
import signal
import threading
import time
from datetime import datetime
from typing import Any, Callable, Protocol

SIGNALS: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)
"""The signals that are masked and caught."""

SIGNAL_EMOJI = "🚨"

# Longest single wait; signals landing on other threads are noticed within this.
_POLL_SECONDS = 0.2


class Notifier(Protocol):
    def noticef(self, emoji: str, fmt: str, *args: Any) -> None: ...


def _seconds_until(until: datetime | float) -> float:
    if isinstance(until, datetime):
        now = datetime.now(until.tzinfo) if until.tzinfo else datetime.now()
        return (until - now).total_seconds()
    return float(until) - time.time()


def _restore(previous: dict[signal.Signals, Any]) -> None:
    for sig, handler in previous.items():
        signal.signal(sig, signal.SIG_DFL if handler is None else handler)
    previous.clear()


class SignalHandle:
    """Holds the signals caught since :func:`setup` installed the handlers."""

    def __init__(self) -> None:
        self._caught: queue.SimpleQueue[signal.Signals] = queue.SimpleQueue()
        self._previous: dict[signal.Signals, Any] = {}

    def _install(self) -> None:
        for sig in SIGNALS:
            self._previous[sig] = signal.signal(sig, self._on_signal)

    def _on_signal(self, signum: int, _frame: object) -> None:
        self._caught.put(signal.Signals(signum))

    def wait_for_signals_until(self, ppfmt: Notifier, until: datetime | float) -> bool:
        """Wait until ``until``; return True if a caught signal interrupts the wait."""
        while True:
            remaining = _seconds_until(until)
            try:
                sig = self._caught.get(timeout=max(0.0, min(remaining, _POLL_SECONDS)))
            except queue.Empty:
                if remaining <= _POLL_SECONDS:
                    return False
                continue
            ppfmt.noticef(SIGNAL_EMOJI, "Caught signal: %s", sig.name)
            return True

    def close(self) -> None:
        """Restore the signal handlers that were in place before."""
        _restore(self._previous)

    def __enter__(self) -> SignalHandle:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def setup() -> SignalHandle:
    """Catch the signals in :data:`SIGNALS` and return the handle holding them."""
    handle = SignalHandle()
    handle._install()
    return handle


def notify_event() -> tuple[threading.Event, Callable[[], None]]:
    """Return an event set by any signal in :data:`SIGNALS`, and a cancel function.

    Calling the cancel function sets the event and restores the previous handlers;
    it must be called from the main thread.
    """
    event = threading.Event()
    previous: dict[signal.Signals, Any] = {}

    def handler(_signum: int, _frame: object) -> None:
        event.set()

    for sig in SIGNALS:
        previous[sig] = signal.signal(sig, handler)

    def cancel() -> None:
        event.set()
        _restore(previous)

    return event, cancel