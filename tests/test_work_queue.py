"""Test suite for the bounded work queue."""

import threading
from concurrent.futures import CancelledError

import pytest

from occurrences.search.errors import QueueClosedError
from occurrences.search.work_queue import BoundedQueue


class TestBoundedQueue:
    """Test put/get/close/abort semantics."""

    def test_fifo_order(self):
        """Items come out in insertion order."""
        queue: BoundedQueue[int] = BoundedQueue(4)
        for i in range(3):
            queue.put(i)
        assert [queue.get() for _ in range(3)] == [0, 1, 2]

    def test_capacity_must_be_positive(self):
        """A zero-capacity queue cannot be created."""
        with pytest.raises(ValueError):
            BoundedQueue(0)

    def test_close_drains_then_stops(self):
        """Buffered items survive close; then get raises QueueClosedError."""
        queue: BoundedQueue[str] = BoundedQueue(4)
        queue.put("a")
        queue.put("b")
        queue.close()
        assert queue.closed
        assert list(queue) == ["a", "b"]
        with pytest.raises(QueueClosedError):
            queue.get()

    def test_close_is_idempotent(self):
        """Closing twice keeps the first error."""
        queue: BoundedQueue[str] = BoundedQueue(1)
        first = RuntimeError("first")
        queue.close(first)
        queue.close(RuntimeError("second"))
        with pytest.raises(RuntimeError, match="first"):
            queue.get()

    def test_put_after_close(self):
        """A closed queue rejects new items."""
        queue: BoundedQueue[int] = BoundedQueue(1)
        queue.close()
        with pytest.raises(QueueClosedError):
            queue.put(1)

    def test_close_with_error_reaches_consumer_after_items(self):
        """The close error is raised only once buffered items are consumed."""
        queue: BoundedQueue[int] = BoundedQueue(2)
        queue.put(1)
        queue.close(OSError("enumeration failed"))
        assert queue.get() == 1
        with pytest.raises(OSError, match="enumeration failed"):
            queue.get()

    def test_full_queue_blocks_producer(self):
        """A producer waits until a consumer makes room."""
        queue: BoundedQueue[int] = BoundedQueue(1)
        queue.put(1)
        second_put_done = threading.Event()

        def producer() -> None:
            queue.put(2)
            second_put_done.set()

        thread = threading.Thread(target=producer)
        thread.start()
        assert not second_put_done.wait(0.2)
        assert len(queue) == 1

        assert queue.get() == 1
        assert second_put_done.wait(2.0)
        thread.join(2.0)
        assert queue.get() == 2

    def test_empty_queue_blocks_consumer_until_close(self):
        """A consumer waits for an item or for the close signal."""
        queue: BoundedQueue[int] = BoundedQueue(1)
        received: list[int] = []

        thread = threading.Thread(target=lambda: received.extend(queue))
        thread.start()
        queue.put(7)
        queue.close()
        thread.join(2.0)
        assert not thread.is_alive()
        assert received == [7]

    def test_abort_wakes_blocked_consumer(self):
        """Abort makes a waiting get raise CancelledError."""
        queue: BoundedQueue[int] = BoundedQueue(1)
        errors: list[BaseException] = []

        def consumer() -> None:
            try:
                queue.get()
            except CancelledError as e:
                errors.append(e)

        thread = threading.Thread(target=consumer)
        thread.start()
        queue.abort()
        thread.join(2.0)
        assert len(errors) == 1

    def test_abort_wakes_blocked_producer(self):
        """Abort makes a waiting put raise CancelledError."""
        queue: BoundedQueue[int] = BoundedQueue(1)
        queue.put(1)
        errors: list[BaseException] = []

        def producer() -> None:
            try:
                queue.put(2)
            except CancelledError as e:
                errors.append(e)

        thread = threading.Thread(target=producer)
        thread.start()
        queue.abort()
        thread.join(2.0)
        assert len(errors) == 1

    def test_abort_drops_buffered_items(self):
        """Nothing can be taken from an aborted queue."""
        queue: BoundedQueue[int] = BoundedQueue(2)
        queue.put(1)
        queue.abort()
        assert len(queue) == 0
        with pytest.raises(CancelledError):
            queue.get()

    def test_many_producers_and_consumers(self):
        """Every item is delivered exactly once under contention."""
        queue: BoundedQueue[int] = BoundedQueue(3)
        received: list[int] = []
        lock = threading.Lock()

        def consume() -> None:
            for item in queue:
                with lock:
                    received.append(item)

        producers = [threading.Thread(target=lambda k=k: [queue.put(k * 100 + i) for i in range(50)]) for k in range(4)]
        consumers = [threading.Thread(target=consume) for _ in range(3)]
        for t in producers + consumers:
            t.start()
        for t in producers:
            t.join(5.0)
        queue.close()
        for t in consumers:
            t.join(5.0)

        assert sorted(received) == sorted(k * 100 + i for k in range(4) for i in range(50))
