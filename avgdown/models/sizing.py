"""SizingResult data model."""

from typing import Optional

from pydantic import BaseModel, Field


class SizingResult(BaseModel):
    """Outcome of an averaging-down calculation.

    When ``target_met`` is set no purchase is recommended, ``shares_to_buy``
    is 0 and the post-purchase projection fields are None.
    """

    current_price: float = Field(..., gt=0, description="Market price per share")
    average_cost: float = Field(..., gt=0, description="Average cost per share")
    share_count: float = Field(..., gt=0, description="Shares currently held")
    target_loss_percent: float = Field(
        ..., ge=0, le=100, description="Requested loss percentage after buying"
    )

    current_cost: float = Field(..., description="Cost basis of the position")
    current_value: float = Field(..., description="Market value of the position")
    current_loss_amount: float = Field(
        ..., description="Value minus cost (negative when underwater)"
    )
    current_loss_percent: float = Field(
        ..., description="Loss relative to cost basis, in percent"
    )
    target_average_cost: Optional[float] = Field(
        default=None, description="Average cost at which the price is exactly the target loss"
    )

    shares_to_buy: int = Field(..., ge=0, description="Whole shares to buy (rounded up)")
    target_met: bool = Field(..., description="Position already meets the target")

    purchase_cost: Optional[float] = Field(default=None, description="Cost of the purchase")
    new_share_count: Optional[float] = Field(default=None, description="Shares after buying")
    new_total_cost: Optional[float] = Field(default=None, description="Cost basis after buying")
    new_average_cost: Optional[float] = Field(
        default=None, description="Average cost after buying"
    )
    new_loss_percent: Optional[float] = Field(
        default=None, description="Projected loss percentage after buying"
    )

    model_config = {"frozen": True}
