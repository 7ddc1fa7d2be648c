"""Page-data sources for avgdown."""

from avgdown.sources.base import BaseSource, SourceError
from avgdown.sources.json_file import JsonSource
from avgdown.sources.page import PageSource

__all__ = [
    "BaseSource",
    "JsonSource",
    "PageSource",
    "SourceError",
]
