from __future__ import annotations

from typing import Any, List, Optional, Union

from pydantic import BaseModel, Field, model_validator

from psychocalc.calculators.enums import SummaryMode

__all__ = [
    "DimensionIn",
    "VariableIn",
    "SchemaIn",
    "CompiledDimensionOut",
    "CompiledVariableOut",
    "CompiledSchemaOut",
    "SurveySummaryRequest",
    "SurveySummaryOut",
]


class DimensionIn(BaseModel):
    name: str
    item_count: int = Field(ge=0)


class VariableIn(BaseModel):
    name: str
    dimensions: List[DimensionIn] = Field(default_factory=list)


class SchemaIn(BaseModel):
    """Either explicit variables, or a uniform ``D1..Dn`` quick structure."""

    variables: List[VariableIn] = Field(default_factory=list)
    dimension_count: Optional[int] = Field(default=None, ge=0)
    items_per_dimension: Optional[int] = Field(default=None, ge=0)
    variable_name: str = "Main variable"

    @model_validator(mode="after")
    def _one_form(self) -> "SchemaIn":
        uniform = self.dimension_count is not None or self.items_per_dimension is not None
        if uniform and self.variables:
            raise ValueError("Give either variables or dimension_count/items_per_dimension, not both")
        if uniform and (self.dimension_count is None or self.items_per_dimension is None):
            raise ValueError("dimension_count and items_per_dimension go together")
        return self


class CompiledDimensionOut(BaseModel):
    variable: str
    name: str
    start_index: int
    item_count: int
    question_labels: List[str]
    question_span: str


class CompiledVariableOut(BaseModel):
    name: str
    start_index: int
    item_count: int
    dimensions: List[CompiledDimensionOut]


class CompiledSchemaOut(BaseModel):
    variables: List[CompiledVariableOut]
    total_columns: int


class SurveySummaryRequest(BaseModel):
    schema_: SchemaIn = Field(alias="schema")
    table: List[List[Any]] = Field(min_length=1, description="Row 0 is a header and is discarded")
    mode: SummaryMode = SummaryMode.AVERAGE
    confirm: bool = Field(default=False, description="Load even when the column count differs from the structure")

    model_config = {"populate_by_name": True}


class SurveySummaryOut(BaseModel):
    mode: SummaryMode
    headers: List[str]
    rows: List[List[Union[int, float]]]
    subject_count: int
