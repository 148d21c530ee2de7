"""Pytest configuration and fixtures for the test suite."""

import tempfile
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from loguru import logger


@pytest.fixture
def temp_workspace() -> Generator[Path, None, None]:
    """Create a temporary workspace for file operations."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def write_file(temp_workspace: Path) -> Callable[[str, str | bytes], Path]:
    """Create a file relative to the workspace."""

    def _write(relative: str, content: str | bytes) -> Path:
        path = temp_workspace / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def log_messages() -> Generator[list[str], None, None]:
    """Collect warning and error log lines as ``LEVEL|message``."""
    messages: list[str] = []
    handler_id = logger.add(messages.append, level="WARNING", format="{level}|{message}")
    yield messages
    logger.remove(handler_id)
