from __future__ import annotations

from typing import Any, List

from pydantic import BaseModel, Field, model_validator

__all__ = [
    "LikertBoundsIn",
    "RecodeRequest",
    "RecodeResponse",
]


class LikertBoundsIn(BaseModel):
    min: float = 1
    max: float = 5

    @model_validator(mode="after")
    def _ordered(self) -> "LikertBoundsIn":
        if self.max < self.min:
            raise ValueError("Likert max must not be below min")
        return self


class RecodeRequest(BaseModel):
    """Raw table with row 0 as headers; ``columns`` are 0-based indices to reverse."""

    table: List[List[Any]] = Field(min_length=1)
    columns: List[int] = Field(default_factory=list)
    bounds: LikertBoundsIn = Field(default_factory=LikertBoundsIn)


class RecodeResponse(BaseModel):
    headers: List[Any]
    rows: List[List[Any]]
    selected_columns: List[int]
    preview_original: List[List[Any]]
    preview_recoded: List[List[Any]]
