"""Search configuration validation."""

from pathlib import Path

from ..common.fs import is_hidden, is_readable, is_virtual, normalize
from ..common.pydantic import SearchConfig
from .errors import InvalidSearchArgumentError, SearchRootAccessDeniedError, SearchRootNotFoundError


def validate_config(pattern: str, root: Path | str, search_hidden: bool = False) -> SearchConfig:
    """Check the search inputs and return a validated configuration.

    Checks run in a fixed order and the first failing one raises:

    - root does not exist: ``SearchRootNotFoundError``
    - root is not readable: ``SearchRootAccessDeniedError``
    - root is not a directory, the pattern contains a newline or is empty,
      the root is hidden while hidden paths are excluded, or the root lies
      under a virtual filesystem: ``InvalidSearchArgumentError``
    """
    root = normalize(root)

    if not root.exists():
        raise SearchRootNotFoundError(f"Directory {root} does not exist")
    if not is_readable(root):
        raise SearchRootAccessDeniedError(f"Directory {root} is not readable")
    if not root.is_dir():
        raise InvalidSearchArgumentError(f"Path {root} is not a directory")
    if "\n" in pattern:
        raise InvalidSearchArgumentError("The pattern cannot contain newlines")
    if not pattern:
        raise InvalidSearchArgumentError("The pattern cannot be empty")
    if not search_hidden and is_hidden(root):
        raise InvalidSearchArgumentError(f"Directory {root} is hidden, but hidden paths are excluded from the search")
    # A symlinked root is listed through its target
    if is_virtual(root) or is_virtual(root.resolve()):
        raise InvalidSearchArgumentError(f"Directory {root} is on a virtual filesystem")

    return SearchConfig(pattern=pattern, root=root, search_hidden=search_hidden)
