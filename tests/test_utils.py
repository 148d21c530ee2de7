"""Test utilities."""

import os

import pytest

from occurrences import Occurrence, OccurrenceStream

needs_permissions = pytest.mark.skipif(
    os.name == "nt" or (hasattr(os, "geteuid") and os.geteuid() == 0),
    reason="file permissions are not enforced for this user",
)

posix_only = pytest.mark.skipif(os.name == "nt", reason="dot-file hiding is a POSIX convention")


def collect(stream: OccurrenceStream) -> list[Occurrence]:
    """Consume a stream and sort its occurrences."""
    with stream:
        return sorted(stream, key=lambda o: (str(o.file), o.line, o.offset))
