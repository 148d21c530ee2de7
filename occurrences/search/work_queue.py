"""A bounded, closable, thread-safe queue.

The search pipeline uses two of these:
- the work queue, carrying file paths from the directory walker to the workers;
- the output stream, carrying occurrences from the workers to the caller.

A full queue blocks ``put`` and an empty one blocks ``get``, which gives backpressure
in both directions. ``close`` marks the end of the data: consumers drain what is left
and then get ``QueueClosedError`` (or the error passed to ``close``). ``abort`` is the
cancellation path: every waiter wakes up with ``CancelledError``.
"""

import threading
from collections import deque
from collections.abc import Iterator
from concurrent.futures import CancelledError
from typing import Generic, TypeVar

from .errors import QueueClosedError

T = TypeVar("T")


class BoundedQueue(Generic[T]):
    """Fixed-capacity producer/consumer queue with an explicit closed state."""

    def __init__(self, capacity: int) -> None:
        """Initialize the queue."""
        if capacity < 1:
            raise ValueError(f"Queue capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._items: deque[T] = deque()
        self._lock = threading.Lock()
        self._not_empty = threading.Condition(self._lock)
        self._not_full = threading.Condition(self._lock)
        self._closed = False
        self._aborted = False
        self._error: BaseException | None = None

    @property
    def closed(self) -> bool:
        """Whether no more items will be accepted."""
        with self._lock:
            return self._closed

    def __len__(self) -> int:
        """Number of buffered items."""
        with self._lock:
            return len(self._items)

    def put(self, item: T) -> None:
        """Append an item, blocking while the queue is full."""
        with self._not_full:
            while len(self._items) >= self._capacity and not (self._closed or self._aborted):
                self._not_full.wait()
            if self._aborted:
                raise CancelledError("Queue aborted")
            if self._closed:
                raise QueueClosedError("Cannot put into a closed queue")
            self._items.append(item)
            self._not_empty.notify()

    def get(self) -> T:
        """Remove and return the next item, blocking while the queue is empty and open."""
        with self._not_empty:
            while not self._items and not (self._closed or self._aborted):
                self._not_empty.wait()
            if self._aborted:
                raise CancelledError("Queue aborted")
            if self._items:
                item = self._items.popleft()
                self._not_full.notify()
                return item
            if self._error is not None:
                raise self._error
            raise QueueClosedError("Queue is closed")

    def close(self, error: BaseException | None = None) -> None:
        """Stop accepting items. Consumers get ``error`` once the queue is drained.

        Closing an already closed queue is a no-op.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._error = error
            self._not_empty.notify_all()
            self._not_full.notify_all()

    def abort(self) -> None:
        """Drop buffered items and wake every waiter with ``CancelledError``."""
        with self._lock:
            self._aborted = True
            self._closed = True
            self._items.clear()
            self._not_empty.notify_all()
            self._not_full.notify_all()

    def __iter__(self) -> Iterator[T]:
        """Yield items until the queue is closed and drained."""
        while True:
            try:
                yield self.get()
            except QueueClosedError:
                return
