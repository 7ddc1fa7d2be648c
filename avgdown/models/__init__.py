"""Data models for avgdown."""

from avgdown.models.failure import Failure, FailureKind
from avgdown.models.holding import Holding
from avgdown.models.position import Position, parse_percent
from avgdown.models.scan import ScanReport
from avgdown.models.sizing import SizingResult

__all__ = [
    "Failure",
    "FailureKind",
    "Holding",
    "Position",
    "ScanReport",
    "SizingResult",
    "parse_percent",
]
