"""avgdown - average down a losing position to a target loss."""

from avgdown.engine import compute, filter_beyond_threshold, scan_positions
from avgdown.models import Failure, Holding, Position, ScanReport, SizingResult

__all__ = [
    "Failure",
    "Holding",
    "Position",
    "ScanReport",
    "SizingResult",
    "compute",
    "filter_beyond_threshold",
    "scan_positions",
]
