"""Line scanner, the worker side of the search pipeline."""

from collections.abc import Iterator
from concurrent.futures import CancelledError
from pathlib import Path
from typing import TYPE_CHECKING

from charset_normalizer import from_path

from ..common.cancel import CancellationToken
from ..common.pydantic import Occurrence
from .binary import PROBE_SIZE, is_binary
from .errors import QueueClosedError
from .work_queue import BoundedQueue

if TYPE_CHECKING:
    from loguru import Logger

DEFAULT_ENCODING = "utf-8"


def find_overlapping(line: str, pattern: str) -> Iterator[int]:
    """Yield the start of every occurrence of ``pattern`` in ``line``, overlaps included.

    >>> list(find_overlapping("AAA", "AA"))
    [0, 1]
    """
    position = 0
    while position < len(line):
        position = line.find(pattern, position)
        if position == -1:
            return
        yield position
        position += 1


def detect_encoding(path: Path) -> str:
    """Best guess of the text encoding of ``path``, UTF-8 if undecided."""
    best_guess = from_path(path).best()
    if best_guess is None:
        return DEFAULT_ENCODING
    return best_guess.encoding


def scan_file(
    path: Path,
    pattern: str,
    token: CancellationToken | None = None,
    encoding: str | None = DEFAULT_ENCODING,
) -> Iterator[Occurrence]:
    """Yield every occurrence of ``pattern`` in a text file, in (line, offset) order.

    Line terminators (``\\n``, ``\\r\\n`` or ``\\r``) split records and are not part of
    the scanned text. Undecodable bytes are replaced rather than raising. When
    ``encoding`` is None the charset is detected first.
    """
    if encoding is None:
        encoding = detect_encoding(path)
    with path.open(encoding=encoding, errors="replace") as f:
        for line_number, line in enumerate(f, start=1):
            if token is not None:
                token.raise_if_cancelled()
            if line.endswith("\n"):
                line = line[:-1]
            for offset in find_overlapping(line, pattern):
                yield Occurrence(file=path, line=line_number, offset=offset)


class LineScanner:
    """Search worker: takes paths from the work queue and publishes occurrences."""

    def __init__(
        self,
        pattern: str,
        paths: BoundedQueue[Path],
        output: BoundedQueue[Occurrence],
        token: CancellationToken,
        log: "Logger",
        encoding: str | None = DEFAULT_ENCODING,
        probe_size: int = PROBE_SIZE,
    ):
        """Initialize the worker."""
        self.pattern = pattern
        self.paths = paths
        self.output = output
        self.token = token
        self.log = log
        self.encoding = encoding
        self.probe_size = probe_size

    def run(self) -> int:
        """Process paths until the work queue is closed and drained. Return the number of files scanned.

        Cancellation ends the loop quietly. Read failures are logged and the file is
        skipped; any other exception propagates.
        """
        scanned = 0
        try:
            while True:
                self.token.raise_if_cancelled()
                try:
                    path = self.paths.get()
                except QueueClosedError:
                    break
                self.token.raise_if_cancelled()
                if self.scan(path):
                    scanned += 1
        except CancelledError:
            pass
        return scanned

    def scan(self, path: Path) -> bool:
        """Scan one file into the output stream. Return False if it was skipped."""
        if is_binary(path, self.probe_size):
            return False
        try:
            for occurrence in scan_file(path, self.pattern, self.token, self.encoding):
                self.output.put(occurrence)
        except FileNotFoundError:
            self.log.warning("Skipped missing file: {}", path)
            return False
        except OSError as e:
            self.log.error("Problem reading the file {}: {}", path, e)
            return False
        return True
