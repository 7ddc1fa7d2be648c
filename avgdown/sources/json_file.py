"""JSON export source."""

import json
import logging
from pathlib import Path

from avgdown.sources.base import BaseSource, SourceError, read_text

logger = logging.getLogger(__name__)


class JsonSource(BaseSource):
    """Source backed by a JSON document.

    The holding is read from an object carrying the holding fields (either
    at the top level or under ``"holding"``). Positions are read from a
    top-level list or from a ``"positions"`` list.
    """

    def __init__(self, document, origin: str = "<json>"):
        self.origin = origin
        self._document = document

    @classmethod
    def from_file(cls, path: Path) -> "JsonSource":
        """Create a source from a JSON file."""
        text = read_text(path)
        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            raise SourceError(f"Invalid JSON in {path}: {e}") from e
        return cls(document, origin=str(path))

    def get_holding_data(self) -> dict:
        document = self._document
        if isinstance(document, dict) and isinstance(document.get("holding"), dict):
            document = document["holding"]
        if not isinstance(document, dict):
            raise SourceError(f"No holding object found in {self.origin}")
        return dict(document)

    def get_positions_data(self) -> list[dict]:
        document = self._document
        if isinstance(document, dict):
            document = document.get("positions")
        if not isinstance(document, list):
            raise SourceError(f"No positions list found in {self.origin}")

        # Non-object entries are passed through for the engine to reject
        logger.debug("Loaded %d position entries from %s", len(document), self.origin)
        return list(document)
