"""Directory walker, the producer side of the search pipeline."""

import os
from concurrent.futures import CancelledError
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from ..common.cancel import CancellationToken
from ..common.fs import is_hidden, is_readable, is_virtual
from ..common.pydantic import SearchConfig
from .work_queue import BoundedQueue

if TYPE_CHECKING:
    from loguru import Logger


class VisitResult(StrEnum):
    """What the walker does after a visitor hook."""

    CONTINUE = "continue"
    SKIP_SUBTREE = "skip_subtree"


class FileVisitor(Protocol):
    """Hooks called by ``walk_file_tree``."""

    def on_enter_directory(self, path: Path) -> VisitResult:
        """Decide whether to descend into a directory, before listing it."""
        ...

    def on_visit_file(self, path: Path, entry: os.DirEntry[str]) -> VisitResult:
        """Visit a non-directory entry."""
        ...

    def on_visit_failed(self, path: Path, exc: OSError) -> VisitResult:
        """Handle a directory that could not be listed or an entry that could not be stat'ed."""
        ...


def walk_file_tree(root: Path, visitor: FileVisitor) -> None:
    """Depth-first walk of ``root`` calling the visitor hooks.

    Symlinks are never followed. ``OSError`` raised while listing a directory or
    inspecting an entry goes to ``on_visit_failed``; anything else propagates.
    """
    if visitor.on_enter_directory(root) is VisitResult.SKIP_SUBTREE:
        return

    stack = [root]
    while stack:
        directory = stack.pop()
        try:
            with os.scandir(directory) as it:
                entries = list(it)
        except OSError as exc:
            visitor.on_visit_failed(directory, exc)
            continue

        subdirectories: list[Path] = []
        for entry in entries:
            path = Path(entry.path)
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError as exc:
                visitor.on_visit_failed(path, exc)
                continue
            if is_dir:
                if visitor.on_enter_directory(path) is VisitResult.CONTINUE:
                    subdirectories.append(path)
            else:
                visitor.on_visit_file(path, entry)

        # Reversed so that popping visits subdirectories in listing order
        stack.extend(reversed(subdirectories))


class SearchFileVisitor:
    """Applies the search skip rules and feeds eligible files into the work queue."""

    def __init__(
        self,
        config: SearchConfig,
        queue: BoundedQueue[Path],
        token: CancellationToken,
        log: "Logger",
    ):
        """Initialize the visitor."""
        self.config = config
        self.queue = queue
        self.token = token
        self.log = log

    def on_enter_directory(self, path: Path) -> VisitResult:
        """Skip virtual filesystems and, unless requested, hidden directories."""
        self.token.raise_if_cancelled()
        if is_virtual(path):
            return VisitResult.SKIP_SUBTREE
        # The root was already checked by the validator
        if path != self.config.root and not self.config.search_hidden and is_hidden(path):
            return VisitResult.SKIP_SUBTREE
        return VisitResult.CONTINUE

    def on_visit_file(self, path: Path, entry: os.DirEntry[str]) -> VisitResult:
        """Queue the file if it is a readable regular file and visible (or hidden files are searched)."""
        self.token.raise_if_cancelled()
        try:
            if not entry.is_file(follow_symlinks=False):
                return VisitResult.CONTINUE
            st = entry.stat(follow_symlinks=False) if os.name == "nt" else None
        except OSError as exc:
            return self.on_visit_failed(path, exc)
        if not self.config.search_hidden and is_hidden(path, st):
            return VisitResult.CONTINUE
        if not is_readable(path):
            return VisitResult.CONTINUE
        self.token.raise_if_cancelled()
        self.queue.put(path)
        return VisitResult.CONTINUE

    def on_visit_failed(self, path: Path, exc: OSError) -> VisitResult:
        """Log the failure and keep walking."""
        self.token.raise_if_cancelled()
        self.log.warning("Could not visit {}: {}", path, exc)
        return VisitResult.CONTINUE


def produce_paths(
    config: SearchConfig,
    queue: BoundedQueue[Path],
    token: CancellationToken,
    log: "Logger",
) -> None:
    """Walk ``config.root`` and push every eligible file into ``queue``.

    The queue is closed exactly once, whatever the outcome. Cancellation ends the
    walk quietly; any other unexpected failure is logged and re-raised.
    """
    try:
        walk_file_tree(config.root, SearchFileVisitor(config, queue, token, log))
    except CancelledError:
        log.debug("Walk of {} cancelled", config.root)
    except Exception as e:
        log.error("Walking {} failed: {!r}", config.root, e)
        raise
    finally:
        queue.close()
