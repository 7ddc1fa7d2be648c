"""Averaging-down computation engine."""

from avgdown.engine.positions import (
    filter_beyond_threshold,
    parse_position,
    scan_positions,
)
from avgdown.engine.sizing import (
    compute,
    parse_holding,
    project_purchase,
    validate_target,
)

__all__ = [
    "compute",
    "filter_beyond_threshold",
    "parse_holding",
    "parse_position",
    "project_purchase",
    "scan_positions",
    "validate_target",
]
