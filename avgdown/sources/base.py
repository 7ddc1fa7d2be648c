"""Base page-data source interface for avgdown."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional


class SourceError(Exception):
    """Raised when a source cannot be read at all."""


class BaseSource(ABC):
    """Abstract base class for page-data sources.

    A source supplies raw holding and position data to the engine. It does
    not validate values or substitute defaults; missing fields are reported
    as None and left to the engine to reject.
    """

    @abstractmethod
    def get_holding_data(self) -> dict:
        """Get raw data for the holding currently shown.

        Returns:
            Dictionary with current_price, average_cost and share_count.
            A value is None when it could not be found.

        Raises:
            SourceError: If the source cannot be read.
        """
        pass

    @abstractmethod
    def get_positions_data(self) -> list[dict]:
        """Get raw entries for every position in the portfolio.

        Returns:
            List of dictionaries with ticker, share_count and percent_change.
            Entries are in display order; percent_change may be a string.

        Raises:
            SourceError: If the source cannot be read.
        """
        pass


def read_text(path: Path, encoding: Optional[str] = "utf-8") -> str:
    """Read a source file, mapping OS errors to SourceError."""
    try:
        return Path(path).read_text(encoding=encoding)
    except OSError as e:
        raise SourceError(f"Could not read {path}: {e.strerror or e}") from e
