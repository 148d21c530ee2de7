"""Cooperative cancellation."""

from collections.abc import Callable
from concurrent.futures import CancelledError
from threading import Event, Lock


class CancellationToken:
    """Cancellation flag shared by the tasks of one search session."""

    def __init__(self) -> None:
        """Initialize an unset token."""
        self._event = Event()
        self._lock = Lock()
        self._callbacks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        """Whether cancellation has been requested."""
        return self._event.is_set()

    def cancel(self) -> None:
        """Request cancellation and run the registered callbacks once."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def on_cancel(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` on cancellation, immediately if already cancelled."""
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def raise_if_cancelled(self) -> None:
        """Raise ``CancelledError`` if cancellation has been requested."""
        if self._event.is_set():
            raise CancelledError("Search cancelled")
