"""Search session: wires the walker, the work queue and the worker pool together."""

import codecs
import os
import threading
from collections.abc import Iterator
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import TYPE_CHECKING, Any, Self

from loguru import logger
from pydantic import BaseModel, Field, field_validator

from ..common.cancel import CancellationToken
from ..common.pydantic import Occurrence, SearchConfig
from .binary import PROBE_SIZE
from .errors import QueueClosedError
from .scanner import DEFAULT_ENCODING, LineScanner
from .validation import validate_config
from .walker import produce_paths
from .work_queue import BoundedQueue

if TYPE_CHECKING:
    from loguru import Logger


def default_worker_count() -> int:
    """Half of the available CPUs, at least one."""
    return max(1, (os.cpu_count() or 1) // 2)


class SearchSettings(BaseModel):
    """Tuning knobs of the search engine."""

    workers: int | None = Field(default=None, ge=1, description="Worker threads. Defaults to half the CPUs.")
    queue_capacity: int = Field(default=256, ge=1, description="Paths buffered between the walker and the workers.")
    stream_capacity: int = Field(default=1024, ge=1, description="Occurrences buffered for the consumer.")
    probe_size: int = Field(default=PROBE_SIZE, ge=1, description="Bytes read to decide whether a file is binary.")
    encoding: str | None = Field(default=DEFAULT_ENCODING, description="Text encoding, None to detect per file.")

    @field_validator("encoding")
    @classmethod
    def validate_encoding(cls, encoding: str | None) -> str | None:
        """Reject unknown codecs up front."""
        if encoding is not None:
            try:
                codecs.lookup(encoding)
            except LookupError as e:
                raise ValueError(f"Unknown encoding {encoding!r}") from e
        return encoding

    @property
    def worker_count(self) -> int:
        """Effective number of workers."""
        return self.workers if self.workers is not None else default_worker_count()


class SearchSession:
    """Runtime state of one search.

    One walker thread produces paths into a bounded work queue; a fixed pool of
    workers scans them and publishes occurrences into the bounded output stream.
    A supervisor thread joins everything and then closes the output stream, with
    the structural error if there was one.
    """

    def __init__(self, config: SearchConfig, settings: SearchSettings | None = None, log: "Logger | None" = None):
        """Initialize the session. Nothing runs until ``start``."""
        self.config = config
        self.settings = settings or SearchSettings()
        self.log = log if log is not None else logger.bind(component="search")
        self.token = CancellationToken()
        self.paths: BoundedQueue[Path] = BoundedQueue(self.settings.queue_capacity)
        self.output: BoundedQueue[Occurrence] = BoundedQueue(self.settings.stream_capacity)
        self._executor: ThreadPoolExecutor | None = None
        self._workers: list[Future[int]] = []
        self._walker_error: BaseException | None = None
        self._walker = threading.Thread(target=self._walk, name="occurrences-walker", daemon=True)
        self._supervisor = threading.Thread(target=self._supervise, name="occurrences-supervisor", daemon=True)
        self._started = False
        self.token.on_cancel(self.paths.abort)
        self.token.on_cancel(self.output.abort)

    @property
    def cancelled(self) -> bool:
        """Whether the session was cancelled."""
        return self.token.cancelled

    @property
    def done(self) -> bool:
        """Whether every task of the session has finished."""
        return self._started and not self._supervisor.is_alive()

    def __enter__(self) -> Self:
        """Start the session."""
        self.start()
        return self

    def __exit__(self, exc_type: Any, exc_value: Any, traceback: Any) -> None:
        """Cancel whatever is still running and wait for it."""
        self.cancel()
        self.join()

    def start(self) -> None:
        """Start the workers, the walker and the supervisor."""
        if self._started:
            raise RuntimeError("Search session already started")
        self._started = True
        self.log.debug(
            "Searching for {!r} in {} with {} workers",
            self.config.pattern,
            self.config.root,
            self.settings.worker_count,
        )
        self._executor = ThreadPoolExecutor(
            max_workers=self.settings.worker_count, thread_name_prefix="occurrences-worker"
        )
        for _ in range(self.settings.worker_count):
            worker = LineScanner(
                self.config.pattern,
                self.paths,
                self.output,
                self.token,
                self.log,
                encoding=self.settings.encoding,
                probe_size=self.settings.probe_size,
            )
            self._workers.append(self._executor.submit(worker.run))
        self._walker.start()
        self._supervisor.start()

    def cancel(self) -> None:
        """Stop the walker and the workers. Already emitted occurrences stay valid."""
        self.token.cancel()

    def join(self, timeout: float | None = None) -> None:
        """Wait until the session has been torn down."""
        if self._started:
            self._supervisor.join(timeout)

    def _walk(self) -> None:
        try:
            produce_paths(self.config, self.paths, self.token, self.log)
        except Exception as e:
            self._walker_error = e

    def _supervise(self) -> None:
        error: BaseException | None = None
        try:
            # Workers finish once the work queue is closed and drained
            for future in as_completed(self._workers):
                e = future.exception()
                if e is None:
                    continue
                self.log.error("Search worker failed: {!r}", e)
                if error is None:
                    error = e
                    # Stop the walker and the other workers
                    self.paths.abort()
            self._walker.join()
            if self._walker_error is not None:
                error = self._walker_error
        finally:
            if self._executor is not None:
                self._executor.shutdown(wait=True)
            self.output.close(error)
            self.log.debug(
                "Search for {!r} in {} {}",
                self.config.pattern,
                self.config.root,
                "cancelled" if self.cancelled else "failed" if error else "finished",
            )

    def __iter__(self) -> Iterator[Occurrence]:
        """Yield occurrences until the output stream is closed.

        Raises the structural error, if any, after the delivered occurrences.
        Cancellation ends the iteration without an error.
        """
        while True:
            try:
                yield self.output.get()
            except (QueueClosedError, CancelledError):
                return


class OccurrenceStream:
    """Lazy, cancellable, single-use stream of occurrences.

    Nothing is read from disk until iteration starts. Leaving a ``with`` block or
    abandoning the iteration cancels the search.
    """

    def __init__(self, config: SearchConfig, settings: SearchSettings | None = None, log: "Logger | None" = None):
        """Prepare a session for ``config``."""
        self._session = SearchSession(config, settings, log)
        self._consumed = False

    @property
    def config(self) -> SearchConfig:
        """Validated configuration of the search."""
        return self._session.config

    @property
    def cancelled(self) -> bool:
        """Whether the search was cancelled rather than completed."""
        return self._session.cancelled

    def cancel(self) -> None:
        """Cancel the search. Safe to call from any thread, any number of times."""
        self._session.cancel()

    def close(self) -> None:
        """Cancel the search unless it already ended, and wait for its tasks to finish."""
        if not self._session.done:
            self._session.cancel()
        self._session.join()

    def __enter__(self) -> Self:
        """Enter the context."""
        return self

    def __exit__(self, exc_type: Any, exc_value: Any, traceback: Any) -> None:
        """Cancel and tear down the search."""
        self.close()

    def __iter__(self) -> Iterator[Occurrence]:
        """Start the search and yield its occurrences."""
        if self._consumed:
            raise RuntimeError("An occurrence stream can only be iterated once")
        self._consumed = True
        return self._iterate()

    def _iterate(self) -> Iterator[Occurrence]:
        if self._session.cancelled:
            return
        self._session.start()
        try:
            yield from self._session
        except (GeneratorExit, KeyboardInterrupt):
            # The consumer walked away before the stream ended
            self._session.cancel()
            raise
        finally:
            self._session.join()


def search(
    pattern: str,
    root: Path | str,
    search_hidden: bool = False,
    *,
    settings: SearchSettings | None = None,
    log: "Logger | None" = None,
) -> OccurrenceStream:
    """Stream every occurrence of ``pattern`` in the text files under ``root``.

    Invalid inputs raise a ``SearchConfigError`` immediately. Otherwise the search
    starts when the returned stream is iterated. Occurrences of different files
    arrive in no particular order.
    """
    config = validate_config(pattern, root, search_hidden)
    return OccurrenceStream(config, settings, log)
