"""Likert reverse recoding.

Reverse-worded items are reflected around the scale midpoint:

    new = (max + min) - value

Reflection is its own inverse, so applying it twice to the same columns with
the same bounds restores the original values. The arithmetic is decimal so
cells such as 1.01 come back exactly.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import AbstractSet, Any, Iterable, Sequence, Tuple

from psychocalc.core.metrics import measure_time
from psychocalc.core.numeric import parse_float_or_none

__all__ = [
    "LikertBounds",
    "RawTable",
    "reflect",
    "recode",
    "toggle_column",
]


@dataclass(frozen=True, slots=True)
class LikertBounds:
    min: float
    max: float


@dataclass(frozen=True, slots=True)
class RawTable:
    """Imported sheet: row 0 as headers, the rest as heterogeneous cells."""

    headers: Tuple[Any, ...]
    rows: Tuple[Tuple[Any, ...], ...]

    @classmethod
    def from_cells(cls, table: Sequence[Sequence[Any]]) -> "RawTable":
        if not table:
            return cls(headers=(), rows=())
        return cls(
            headers=tuple(table[0]),
            rows=tuple(tuple(row) for row in table[1:]),
        )

    def preview(self, limit: int) -> Tuple[Tuple[Any, ...], ...]:
        return self.rows[:limit]

    def as_lists(self) -> list[list[Any]]:
        return [list(self.headers), *(list(row) for row in self.rows)]


def reflect(value: float, bounds: LikertBounds) -> float | int:
    """Mirror ``value`` inside ``bounds``."""

    result = Decimal(str(bounds.max)) + Decimal(str(bounds.min)) - Decimal(str(value))
    if result == result.to_integral_value():
        return int(result)
    return float(result)


@measure_time("engine.recode")
def recode(table: RawTable, selected_columns: AbstractSet[int], bounds: LikertBounds) -> RawTable:
    """Return a new table with the selected columns reflected.

    Non-numeric cells and unselected columns pass through unchanged; the
    input table is never modified.
    """
    recoded_rows = []
    for row in table.rows:
        cells = []
        for idx, cell in enumerate(row):
            if idx in selected_columns:
                numeric = parse_float_or_none(cell)
                if numeric is not None:
                    cells.append(reflect(numeric, bounds))
                    continue
            cells.append(cell)
        recoded_rows.append(tuple(cells))
    return RawTable(headers=table.headers, rows=tuple(recoded_rows))


def toggle_column(selected: Iterable[int], column: int) -> frozenset[int]:
    """Add ``column`` to the selection, or remove it if already selected."""

    current = frozenset(selected)
    return current - {column} if column in current else current | {column}
