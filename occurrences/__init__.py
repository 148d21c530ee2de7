"""Concurrent literal substring search over directory trees."""

from .common.pydantic import Occurrence, SearchConfig
from .search.errors import (
    InvalidSearchArgumentError,
    SearchConfigError,
    SearchRootAccessDeniedError,
    SearchRootNotFoundError,
)
from .search.session import OccurrenceStream, SearchSettings, search

__all__ = [
    "InvalidSearchArgumentError",
    "Occurrence",
    "OccurrenceStream",
    "SearchConfig",
    "SearchConfigError",
    "SearchRootAccessDeniedError",
    "SearchRootNotFoundError",
    "SearchSettings",
    "search",
]
