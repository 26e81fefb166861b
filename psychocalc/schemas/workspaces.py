from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field

from psychocalc.schemas.aiken import AikenReportOut, ScaleOptionOut
from psychocalc.schemas.recode import LikertBoundsIn
from psychocalc.schemas.survey import CompiledSchemaOut

__all__ = [
    "ShapeIn",
    "CellIn",
    "ScaleOptionCreate",
    "ScaleOptionUpdate",
    "ConfidenceIn",
    "AikenWorkspaceOut",
    "SurveyWorkspaceOut",
    "RecodeWorkspaceOut",
    "ColumnSelectionIn",
]


class ShapeIn(BaseModel):
    """Counts below 1 or non-numeric fall back to 1."""

    items: Any = 1
    judges: Any = 1


class CellIn(BaseModel):
    value: Any = Field(default=None, description="Non-numeric input stores 0")


class ScaleOptionCreate(BaseModel):
    label: Optional[str] = None
    value: Any = None


class ScaleOptionUpdate(BaseModel):
    label: Optional[str] = None
    value: Any = None


class ConfidenceIn(BaseModel):
    confidence: float


class AikenWorkspaceOut(BaseModel):
    id: str
    items: int
    judges: int
    matrix: List[List[int]]
    scale: List[ScaleOptionOut]
    scale_usable: bool
    confidence: float
    result: Optional[AikenReportOut] = None


class SurveyWorkspaceOut(BaseModel):
    id: str
    structure: CompiledSchemaOut
    subject_count: int


class ColumnSelectionIn(BaseModel):
    columns: List[int] = Field(default_factory=list)


class RecodeWorkspaceOut(BaseModel):
    id: str
    headers: List[Any]
    row_count: int
    selected_columns: List[int]
    bounds: LikertBoundsIn
    preview: List[List[Any]]
