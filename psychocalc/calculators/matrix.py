"""Rectangular integer response matrix with value semantics.

Rows are items (Aiken) or subjects, columns are judges or questions. Every
edit returns a new :class:`ResponseMatrix`; only the touched row is rebuilt
and untouched rows are shared, so callers comparing by identity see a change
at the matrix and at the edited row, and nowhere else.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Sequence, Tuple

from psychocalc.core.numeric import parse_int_or_zero

__all__ = ["ResponseMatrix", "Row"]

Row = Tuple[int, ...]


@dataclass(frozen=True, slots=True)
class ResponseMatrix:
    rows: Tuple[Row, ...]
    column_count: int

    def __post_init__(self) -> None:
        if self.column_count < 0:
            raise ValueError("column_count must be >= 0")
        for row in self.rows:
            if len(row) != self.column_count:
                raise ValueError(
                    f"Matrix rows must all have {self.column_count} cells, got {len(row)}"
                )

    @classmethod
    def zeros(cls, row_count: int, column_count: int) -> "ResponseMatrix":
        if row_count < 0 or column_count < 0:
            raise ValueError("Matrix dimensions must be >= 0")
        empty_row: Row = (0,) * column_count
        return cls(rows=tuple(empty_row for _ in range(row_count)), column_count=column_count)

    @classmethod
    def from_raw(cls, table: Sequence[Sequence[Any]]) -> "ResponseMatrix":
        """Coerce an externally parsed table into a matrix.

        The first row fixes the column count; shorter rows are zero-padded
        and longer rows truncated so the result stays rectangular.
        """
        if not table:
            return cls(rows=(), column_count=0)
        width = len(table[0])
        rows = []
        for raw_row in table:
            cells = [parse_int_or_zero(cell) for cell in list(raw_row)[:width]]
            cells.extend([0] * (width - len(cells)))
            rows.append(tuple(cells))
        return cls(rows=tuple(rows), column_count=width)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def shape(self) -> Tuple[int, int]:
        return self.row_count, self.column_count

    def with_cell(self, row: int, column: int, value: Any) -> "ResponseMatrix":
        """Return a copy with one cell replaced by ``parse_int_or_zero(value)``."""
        if not 0 <= row < self.row_count or not 0 <= column < self.column_count:
            raise IndexError(f"Cell ({row}, {column}) is outside a {self.row_count}x{self.column_count} matrix")
        current = self.rows[row]
        new_row = current[:column] + (parse_int_or_zero(value),) + current[column + 1:]
        return ResponseMatrix(
            rows=self.rows[:row] + (new_row,) + self.rows[row + 1:],
            column_count=self.column_count,
        )

    def as_lists(self) -> list[list[int]]:
        return [list(row) for row in self.rows]

    def __iter__(self) -> Iterator[Row]:
        return iter(self.rows)

    def __len__(self) -> int:
        return self.row_count
