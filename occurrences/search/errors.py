"""Search errors."""


class SearchConfigError(Exception):
    """Invalid search configuration, raised before any traversal starts."""


class SearchRootNotFoundError(SearchConfigError, FileNotFoundError):
    """The search root does not exist."""


class SearchRootAccessDeniedError(SearchConfigError, PermissionError):
    """The search root is not readable."""


class InvalidSearchArgumentError(SearchConfigError, ValueError):
    """The pattern or the root is not acceptable for a search."""


class QueueClosedError(Exception):
    """The queue was closed and has no more items."""
