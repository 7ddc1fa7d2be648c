"""Failure data model."""

from typing import Literal

from pydantic import BaseModel, Field

FailureKind = Literal[
    "InvalidHolding",
    "InvalidTarget",
    "DegenerateTarget",
    "IncompleteSourceData",
    "MalformedEntry",
]


class Failure(BaseModel):
    """A typed failure returned in place of a result."""

    kind: FailureKind = Field(..., description="Failure classification")
    message: str = Field(..., description="Human readable reason, shown verbatim")

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"
