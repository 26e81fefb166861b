from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field

__all__ = [
    "ImportedTableOut",
    "ExportTableIn",
    "ApaTableIn",
]


class ImportedTableOut(BaseModel):
    filename: str
    row_count: int
    column_count: int
    rows: List[List[Any]]


class ExportTableIn(BaseModel):
    title: str = ""
    headers: List[Any] = Field(default_factory=list)
    rows: List[List[Any]] = Field(default_factory=list)
    filename: Optional[str] = None
    sheet_name: str = "Sheet1"


class ApaTableIn(BaseModel):
    title: str
    headers: List[Any]
    rows: List[List[Any]] = Field(default_factory=list)
    caption: Optional[str] = Field(default=None, description="Defaults to the locale's table caption")
    note: Optional[str] = Field(default=None, description="Defaults to the locale's note label; empty string omits the row")
