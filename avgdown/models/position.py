"""Position data model."""

import re
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

# Characters the broker page wraps around a signed percentage.
_PERCENT_NOISE = re.compile(r"[%,+\s]")


def parse_percent(value) -> Optional[float]:
    """Normalise a sign-bearing percent value to a float.

    Accepts numbers and strings such as ``"-25.00"``, ``"+3.10%"``,
    ``"-1,234.50%"`` or ``"−4.2%"`` (unicode minus).

    Args:
        value: Raw percent value.

    Returns:
        The signed percentage, or None if it cannot be parsed.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = _PERCENT_NOISE.sub("", value.replace("−", "-"))
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None

    # NaN and infinities are not percentages
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return number


class Position(BaseModel):
    """Snapshot of one portfolio position used for scanning."""

    ticker: str = Field(..., min_length=1, description="Ticker symbol")
    share_count: float = Field(
        default=0.0,
        ge=0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("share_count", "shareCount", "shares"),
        description="Shares held",
    )
    percent_change: float = Field(
        ...,
        allow_inf_nan=False,
        validation_alias=AliasChoices("percent_change", "percentChange"),
        description="Signed percent gain/loss (negative for a loss)",
    )

    model_config = {"frozen": True}

    @field_validator("ticker", mode="before")
    @classmethod
    def _strip_ticker(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("percent_change", mode="before")
    @classmethod
    def _normalise_percent(cls, value):
        number = parse_percent(value)
        if number is None:
            raise ValueError(f"unparseable percent change: {value!r}")
        return number
