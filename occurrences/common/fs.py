"""Filesystem helpers shared by the validator and the walker."""

import os
import stat
from pathlib import Path

# Pseudo filesystems that are never traversed, whatever the visibility flags say.
VIRTUAL_FILESYSTEMS: frozenset[Path] = frozenset(Path(p) for p in ("/proc", "/sys", "/dev", "/run"))


def normalize(path: Path | str) -> Path:
    """Return an absolute, normalized path without resolving symlinks."""
    return Path(os.path.abspath(path))


def is_virtual(path: Path) -> bool:
    """Return whether ``path`` lies under a virtual filesystem."""
    path = normalize(path)
    return any(path.is_relative_to(prefix) for prefix in VIRTUAL_FILESYSTEMS)


def is_hidden(path: Path, st: os.stat_result | None = None) -> bool:
    """Return whether ``path`` is hidden.

    On POSIX a path is hidden when its name starts with a dot. On Windows the
    ``FILE_ATTRIBUTE_HIDDEN`` attribute decides. The filesystem root is never hidden.
    """
    name = path.name
    if not name:
        return False
    if os.name == "nt":
        try:
            st = st or path.stat()
        except OSError:
            return False
        return bool(getattr(st, "st_file_attributes", 0) & stat.FILE_ATTRIBUTE_HIDDEN)
    return name.startswith(".")


def is_readable(path: Path) -> bool:
    """Return whether the current process may read ``path``."""
    return os.access(path, os.R_OK)
