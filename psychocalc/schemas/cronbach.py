from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field, model_validator

from psychocalc.calculators.enums import CronbachMode

__all__ = [
    "VariableRangeIn",
    "CronbachComputeRequest",
    "CronbachRowOut",
    "CronbachResponse",
]


class VariableRangeIn(BaseModel):
    name: str = ""
    start: int = Field(description="1-based first column")
    end: int = Field(description="1-based last column, inclusive")


class CronbachComputeRequest(BaseModel):
    """Raw subject table; row 0 is a header and is discarded."""

    table: List[List[Any]] = Field(min_length=1)
    mode: CronbachMode = CronbachMode.GLOBAL
    variables: List[VariableRangeIn] = Field(default_factory=list)

    @model_validator(mode="after")
    def _variables_required(self) -> "CronbachComputeRequest":
        if self.mode is CronbachMode.VARIABLES and not self.variables:
            raise ValueError("At least one variable range is required in variables mode")
        return self


class CronbachRowOut(BaseModel):
    label: str
    start: int
    end: int
    n_items: Optional[int] = None
    n_subjects: Optional[int] = None
    sum_item_variances: Optional[float] = None
    total_variance: Optional[float] = None
    alpha: Optional[float] = None
    alpha_display: Optional[str] = None
    interpretation: Optional[str] = None
    interpretation_label: Optional[str] = None
    error: Optional[str] = None


class CronbachResponse(BaseModel):
    mode: CronbachMode
    rows: List[CronbachRowOut]
