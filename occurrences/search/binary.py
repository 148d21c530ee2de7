"""Binary file detection."""

from pathlib import Path

PROBE_SIZE = 512


def is_binary(path: Path, probe_size: int = PROBE_SIZE) -> bool:
    """Guess whether a file is binary from its first ``probe_size`` bytes.

    A NUL byte marks the file as binary. Empty and unreadable files are treated as
    binary too, so they are skipped instead of scanned.
    """
    try:
        with path.open("rb") as f:
            head = f.read(probe_size)
    except OSError:
        return True
    return not head or b"\x00" in head
