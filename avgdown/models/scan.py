"""ScanReport data model."""

from pydantic import BaseModel, Field

from avgdown.models.failure import Failure
from avgdown.models.position import Position


class ScanReport(BaseModel):
    """Result of scanning a portfolio for positions beyond a loss threshold."""

    threshold_percent: float = Field(..., ge=0, le=100, description="Loss threshold")
    total: int = Field(..., ge=0, description="Number of entries scanned")
    matches: list[Position] = Field(
        default_factory=list, description="Positions beyond the threshold, input order"
    )
    skipped: list[Failure] = Field(
        default_factory=list, description="Entries dropped as malformed"
    )

    model_config = {"frozen": True}
