from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from psychocalc.calculators.constants import DEFAULT_SCALE

__all__ = [
    "ScaleOptionIn",
    "ScaleOptionOut",
    "AikenComputeRequest",
    "AikenItemOut",
    "AikenReportOut",
]


class ScaleOptionIn(BaseModel):
    label: str
    value: Any = Field(description="Coerced with the integer cell policy; non-numeric becomes 0")


class ScaleOptionOut(BaseModel):
    label: str
    value: int


def _default_scale() -> List[ScaleOptionIn]:
    return [ScaleOptionIn(label=label, value=value) for label, value in DEFAULT_SCALE]


class AikenComputeRequest(BaseModel):
    """Items x judges ratings; row 0 is data, ragged rows are padded."""

    matrix: List[List[Any]] = Field(min_length=1)
    scale: List[ScaleOptionIn] = Field(default_factory=_default_scale, min_length=2)
    confidence: float = 0.95

    @field_validator("matrix")
    @classmethod
    def _first_row_not_empty(cls, value: List[List[Any]]) -> List[List[Any]]:
        if not value[0]:
            raise ValueError("The first row must hold at least one judge rating")
        return value


class AikenItemOut(BaseModel):
    item_index: int
    mean: Optional[float]
    v: Optional[float]
    v_display: str
    verdict: str
    verdict_label: str


class AikenReportOut(BaseModel):
    items: List[AikenItemOut]
    lo: int
    hi: int
    threshold: float
    confidence: float
    valid_count: int
