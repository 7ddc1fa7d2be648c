"""Holding data model."""

from pydantic import AliasChoices, BaseModel, Field


class Holding(BaseModel):
    """Current state of a single position used for sizing.

    Accepts the camelCase names emitted by the page extractor as well as
    the snake_case field names.
    """

    current_price: float = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("current_price", "currentPrice"),
        description="Market price per share",
    )
    average_cost: float = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("average_cost", "averageCost", "avgCost"),
        description="Average cost basis per share",
    )
    share_count: float = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("share_count", "shareCount", "numShares"),
        description="Shares currently held (may be fractional)",
    )

    model_config = {"frozen": True}

    @property
    def current_cost(self) -> float:
        return self.average_cost * self.share_count

    @property
    def current_value(self) -> float:
        return self.current_price * self.share_count
