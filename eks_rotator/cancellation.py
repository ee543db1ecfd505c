#!/usr/bin/env python3
"""Run-wide cancellation signal for the rotation tool.

One CancellationSignal is created per run and handed to every component that
blocks on external state. Cancellation is cooperative: it is only observed at
poll suspension points, never forced into an in-flight AWS or kubectl call.
"""

import signal
import threading
from typing import Iterable, Optional

from .errors import CancellationError


class CancellationSignal:
    """Thread-safe, fire-once cancellation flag with an optional deadline"""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self.reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "rotation cancelled") -> bool:
        """
        Fire the signal. Only the first call records its reason.

        Returns:
            bool: True if this call fired the signal, False if it was already cancelled
        """
        with self._lock:
            if self._event.is_set():
                return False
            self.reason = reason
            self._event.set()
            return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block up to timeout seconds; True means the signal fired."""
        return self._event.wait(timeout)

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CancellationError(self.reason or "rotation cancelled")

    def set_deadline(self, seconds: float) -> None:
        """Cancel automatically once the given number of seconds has elapsed."""
        self.clear_deadline()
        self._timer = threading.Timer(seconds, self.cancel, args=(f"deadline of {seconds}s exceeded",))
        self._timer.daemon = True
        self._timer.start()

    def clear_deadline(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


def install_signal_handlers(
    cancellation: CancellationSignal,
    signals: Iterable[int] = (signal.SIGINT, signal.SIGTERM),
    printer=None,
) -> None:
    """
    Route process signals into the cancellation signal.

    Must be called from the main thread. A second signal after cancellation
    restores the default handler so an operator can still force an exit.

    Args:
        cancellation: Signal to fire
        signals: Signal numbers to handle (default: SIGINT, SIGTERM)
        printer: Printer instance for output
    """

    def _handler(signum, _frame):
        name = signal.Signals(signum).name
        if cancellation.cancel(f"received {name}"):
            if printer:
                printer.print_warning(f"Received {name}, cancelling after the current step...")
        else:
            signal.signal(signum, signal.SIG_DFL)

    for signum in signals:
        signal.signal(signum, _handler)
