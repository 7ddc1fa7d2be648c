"""Loss-threshold scanning over portfolio positions.

Scanning is best-effort: a single entry that cannot be parsed is skipped
and reported, never allowed to abort the scan.
"""

import logging
from typing import Iterable, Mapping, Union

from pydantic import ValidationError

from avgdown.engine.sizing import validate_target
from avgdown.models import Failure, Position, ScanReport

logger = logging.getLogger(__name__)

PositionEntry = Union[Position, Mapping]


def parse_position(entry: PositionEntry) -> Union[Position, Failure]:
    """Normalise a raw position entry.

    Args:
        entry: A Position or a mapping with ticker, share count and a
            (possibly string-typed) percent change.

    Returns:
        The Position, or a ``MalformedEntry`` failure.
    """
    if isinstance(entry, Position):
        return entry

    if not isinstance(entry, Mapping):
        return Failure(
            kind="MalformedEntry",
            message=f"Expected a position entry, got {type(entry).__name__}",
        )

    try:
        return Position.model_validate(entry)
    except ValidationError as e:
        ticker = entry.get("ticker") or "?"
        fields = ", ".join(
            sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        )
        return Failure(
            kind="MalformedEntry",
            message=f"Skipped position {ticker}: invalid {fields or 'entry'}",
        )


def is_beyond_threshold(position: Position, threshold_percent: float) -> bool:
    """Whether a position's loss is strictly worse than the threshold."""
    return position.percent_change < -threshold_percent


def _scan(entries: Iterable[PositionEntry], threshold_percent: float):
    matches: list[Position] = []
    skipped: list[Failure] = []
    total = 0

    for entry in entries:
        total += 1
        parsed = parse_position(entry)

        if isinstance(parsed, Failure):
            logger.warning(parsed.message)
            skipped.append(parsed)
            continue

        if is_beyond_threshold(parsed, threshold_percent):
            matches.append(parsed)

    return matches, skipped, total


def filter_beyond_threshold(
    positions: Iterable[PositionEntry],
    threshold_percent: float,
) -> list[Position]:
    """Select positions whose loss exceeds a threshold.

    A position is kept iff ``percent_change < -threshold_percent``; one
    sitting exactly at the threshold is not. Input order is preserved and
    malformed entries are dropped.

    Args:
        positions: Positions or raw position entries, in display order.
        threshold_percent: Loss threshold as a positive percentage.

    Returns:
        New list of matching positions in input order.
    """
    matches, _, _ = _scan(positions, threshold_percent)
    return matches


def scan_positions(
    entries: Iterable[PositionEntry],
    threshold_percent: float,
) -> Union[ScanReport, Failure]:
    """Scan a portfolio and report matches along with skipped entries.

    Args:
        entries: Positions or raw position entries.
        threshold_percent: Loss threshold in [0, 100].

    Returns:
        ScanReport, or an ``InvalidTarget`` failure for a bad threshold.
    """
    failure = validate_target(threshold_percent)
    if failure is not None:
        return failure

    matches, skipped, total = _scan(entries, threshold_percent)
    logger.debug(
        "Scanned %d positions: %d beyond -%s%%, %d skipped",
        total,
        len(matches),
        threshold_percent,
        len(skipped),
    )

    return ScanReport(
        threshold_percent=threshold_percent,
        total=total,
        matches=matches,
        skipped=skipped,
    )
