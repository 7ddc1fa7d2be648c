"""Share sizing for averaging down a losing position.

Computes how many whole shares must be bought at the current price so that
the blended average cost puts the position at a chosen loss percentage.

All functions here are pure: they take every input as an argument and
return a result or a Failure value instead of raising.
"""

import logging
import math
import sys
from typing import Mapping, Optional, Union

from pydantic import ValidationError

from avgdown.models import Failure, Holding, SizingResult

logger = logging.getLogger(__name__)

HOLDING_FIELDS = ("current_price", "average_cost", "share_count")

# Float ulps of error allowed per term when solving for the share count
NOISE_ULPS = 16

# Wire names used by page extractors for each holding field.
_FIELD_ALIASES = {
    "current_price": ("current_price", "currentPrice"),
    "average_cost": ("average_cost", "averageCost", "avgCost"),
    "share_count": ("share_count", "shareCount", "numShares"),
}

SizingOutcome = Union[SizingResult, Failure]


def _lookup(data: Mapping, field: str):
    for key in _FIELD_ALIASES[field]:
        if data.get(key) is not None:
            return data[key]
    return None


def parse_holding(data: Union[Holding, Mapping]) -> Union[Holding, Failure]:
    """Validate raw holding data into a Holding.

    Args:
        data: A Holding or a mapping with the holding fields.

    Returns:
        The Holding, an ``IncompleteSourceData`` failure if a field is
        missing, or an ``InvalidHolding`` failure if a field is not a
        positive finite number.
    """
    if isinstance(data, Holding):
        return data

    if not isinstance(data, Mapping):
        return Failure(
            kind="InvalidHolding",
            message=f"Expected holding data, got {type(data).__name__}",
        )

    found = {field: _lookup(data, field) for field in HOLDING_FIELDS}
    missing = [field for field, value in found.items() if value is None]
    if missing:
        return Failure(
            kind="IncompleteSourceData",
            message=(
                "Could not obtain all required data "
                f"(missing: {', '.join(missing)}). "
                f"Found: Price={found['current_price']}, "
                f"Avg Cost={found['average_cost']}, "
                f"Shares={found['share_count']}."
            ),
        )

    try:
        return Holding.model_validate(found)
    except ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        return Failure(
            kind="InvalidHolding",
            message=(
                "Holding fields must be positive finite numbers "
                f"(invalid: {', '.join(fields) or 'unknown'})."
            ),
        )


def validate_target(target_loss_percent) -> Optional[Failure]:
    """Check that a target loss percentage is a finite number in [0, 100].

    Returns:
        An ``InvalidTarget`` failure, or None if the target is valid.
    """
    if isinstance(target_loss_percent, bool) or not isinstance(
        target_loss_percent, (int, float)
    ):
        return Failure(
            kind="InvalidTarget",
            message=f"Target loss must be a number, got {target_loss_percent!r}",
        )
    if not math.isfinite(target_loss_percent) or not 0 <= target_loss_percent <= 100:
        return Failure(
            kind="InvalidTarget",
            message="Please enter a valid target loss percentage (0-100)",
        )
    return None


def round_up_shares(shares_needed: float, tolerance: float = 0.0) -> int:
    """Round an unrounded share count up to whole shares.

    Args:
        shares_needed: Unrounded share count.
        tolerance: Rounding error bound on ``shares_needed``. A count within
            this distance of a whole number is taken as that number, so an
            exact solution such as 30 is not bought as 31.

    Returns:
        The whole number of shares, 0 for a count at or below ``tolerance``.
    """
    if shares_needed <= tolerance:
        return 0
    nearest = round(shares_needed)
    if abs(shares_needed - nearest) <= tolerance:
        return int(nearest)
    return math.ceil(shares_needed)


def project_purchase(holding: Holding, shares_to_buy: int) -> dict:
    """Project the position after buying shares at the current price.

    Args:
        holding: Current holding.
        shares_to_buy: Number of shares bought at ``holding.current_price``.

    Returns:
        Dictionary with purchase_cost, new_share_count, new_total_cost,
        new_average_cost and new_loss_percent.
    """
    price = holding.current_price
    purchase_cost = price * shares_to_buy
    new_share_count = holding.share_count + shares_to_buy
    new_total_cost = holding.current_cost + purchase_cost
    new_average_cost = new_total_cost / new_share_count
    new_loss_percent = (price * new_share_count - new_total_cost) / new_total_cost * 100

    return {
        "purchase_cost": purchase_cost,
        "new_share_count": new_share_count,
        "new_total_cost": new_total_cost,
        "new_average_cost": new_average_cost,
        "new_loss_percent": new_loss_percent,
    }


def compute(
    holding: Union[Holding, Mapping],
    target_loss_percent: float,
) -> SizingOutcome:
    """Compute how many shares to buy to reach a target loss percentage.

    Solves ``(cost + price * x) / (shares + x) = price / (1 - L/100)`` for
    ``x`` and rounds up to a whole share.

    Args:
        holding: Current holding, or raw holding data.
        target_loss_percent: Desired loss after buying, in [0, 100].

    Returns:
        SizingResult, or a Failure of kind InvalidTarget, InvalidHolding,
        IncompleteSourceData or DegenerateTarget.
    """
    failure = validate_target(target_loss_percent)
    if failure is not None:
        return failure

    parsed = parse_holding(holding)
    if isinstance(parsed, Failure):
        return parsed
    holding = parsed

    target = float(target_loss_percent)
    price = holding.current_price
    shares = holding.share_count

    current_cost = holding.current_cost
    current_value = holding.current_value
    current_loss_amount = current_value - current_cost
    current_loss_percent = current_loss_amount / current_cost * 100

    if not all(
        math.isfinite(value)
        for value in (current_cost, current_value, current_loss_percent)
    ):
        return Failure(
            kind="InvalidHolding",
            message="Holding values are too large to compute the position's cost and value",
        )

    base = {
        "current_price": price,
        "average_cost": holding.average_cost,
        "share_count": shares,
        "target_loss_percent": target,
        "current_cost": current_cost,
        "current_value": current_value,
        "current_loss_amount": current_loss_amount,
        "current_loss_percent": current_loss_percent,
    }

    target_loss_ratio = -target / 100
    if 1 + target_loss_ratio == 0:
        return Failure(
            kind="DegenerateTarget",
            message="A 100% target loss cannot be reached by averaging down",
        )

    target_average_cost = price / (1 + target_loss_ratio)
    if not math.isfinite(target_average_cost):
        return Failure(
            kind="DegenerateTarget",
            message=f"The average cost for a {target:g}% loss is too large to compute",
        )
    base["target_average_cost"] = target_average_cost

    if current_loss_percent >= -target:
        logger.debug("Target %.2f%% already met at %.2f%%", target, current_loss_percent)
        return SizingResult(**base, shares_to_buy=0, target_met=True)

    denominator = price - target_average_cost
    if denominator == 0:
        return Failure(
            kind="DegenerateTarget",
            message=(
                "Buying at the current price can never bring this position "
                f"to a {target:g}% loss"
            ),
        )

    shares_needed = (target_average_cost * shares - current_cost) / denominator
    # Rounding error bound: the numerator terms are each below current_cost
    noise = NOISE_ULPS * sys.float_info.epsilon * (
        2 * (current_cost / abs(denominator)) + abs(shares_needed)
    )
    if not (math.isfinite(shares_needed) and math.isfinite(noise)):
        return Failure(
            kind="DegenerateTarget",
            message=f"The purchase needed for a {target:g}% loss is too large to compute",
        )

    shares_to_buy = round_up_shares(shares_needed, noise)
    if shares_to_buy == 0:
        return SizingResult(**base, shares_to_buy=0, target_met=True)

    projection = project_purchase(holding, shares_to_buy)
    if not all(math.isfinite(value) for value in projection.values()):
        return Failure(
            kind="DegenerateTarget",
            message=f"The purchase needed for a {target:g}% loss is too large to compute",
        )

    logger.debug(
        "Sizing: %.4f shares needed, buying %d (new loss %.4f%%)",
        shares_needed,
        shares_to_buy,
        projection["new_loss_percent"],
    )

    return SizingResult(
        **base,
        **projection,
        shares_to_buy=shares_to_buy,
        target_met=False,
    )
