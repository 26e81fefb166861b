from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from psychocalc.calculators.constants import LEVEL_COUNT_MAX, LEVEL_COUNT_MIN
from psychocalc.schemas.survey import VariableIn

__all__ = [
    "ItemScaleIn",
    "BaremoRequest",
    "RangeLevelOut",
    "BaremoRowOut",
    "BaremoTableOut",
]


class ItemScaleIn(BaseModel):
    min: int = 1
    max: int = 5

    @model_validator(mode="after")
    def _ordered(self) -> "ItemScaleIn":
        if self.max <= self.min:
            raise ValueError("Item scale max must be greater than min")
        return self


class BaremoRequest(BaseModel):
    item_scale: ItemScaleIn = Field(default_factory=ItemScaleIn)
    variables: List[VariableIn] = Field(min_length=1)
    level_count: int = Field(default=3, ge=LEVEL_COUNT_MIN, le=LEVEL_COUNT_MAX)
    level_names: Optional[List[str]] = Field(
        default=None,
        description="Labels in order; omitted selects the default template for the level count",
    )


class RangeLevelOut(BaseModel):
    label: str
    lower_bound: int
    upper_bound: int
    display: str


class BaremoRowOut(BaseModel):
    variable: str
    component: str
    item_count: int
    min_raw: int
    max_raw: int
    is_total: bool
    levels: List[RangeLevelOut]


class BaremoTableOut(BaseModel):
    level_names: List[str]
    headers: List[str]
    rows: List[BaremoRowOut]
