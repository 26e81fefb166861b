"""Survey structure compilation and per-dimension aggregation.

A survey is declared as variables, each made of dimensions with an item
count. Raw response files carry one column per item, laid out left to right
in declaration order. :func:`compile_schema` turns the declaration into an
immutable :class:`CompiledSchema` with the column offset of every dimension;
aggregation only ever reads offsets from the compiled form.

Editing the declaration means compiling again, and subject rows loaded
against the previous compilation are no longer valid.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import count
from typing import Any, Optional, Sequence, Tuple

from psychocalc.calculators.constants import AVERAGE_DECIMALS
from psychocalc.calculators.enums import SummaryMode
from psychocalc.core.metrics import measure_time
from psychocalc.core.numeric import parse_float_or_zero, safe_div, safe_round

__all__ = [
    "Dimension",
    "Variable",
    "VariableSchema",
    "CompiledDimension",
    "CompiledVariable",
    "CompiledSchema",
    "SubjectRow",
    "SubjectSummary",
    "SurveySummary",
    "ColumnMismatch",
    "compile_schema",
    "uniform_schema",
    "load_subjects",
    "detect_mismatch",
    "aggregate",
    "summary_headers",
]

_ids = count(1)


def _next_id() -> int:
    return next(_ids)


@dataclass(frozen=True, slots=True)
class Dimension:
    name: str
    item_count: int
    id: int = field(default_factory=_next_id)

    def __post_init__(self) -> None:
        if self.item_count < 0:
            raise ValueError("item_count must be >= 0")


@dataclass(frozen=True, slots=True)
class Variable:
    name: str
    dimensions: Tuple[Dimension, ...]
    id: int = field(default_factory=_next_id)

    @property
    def item_count(self) -> int:
        return sum(dim.item_count for dim in self.dimensions)


@dataclass(frozen=True, slots=True)
class VariableSchema:
    variables: Tuple[Variable, ...]


@dataclass(frozen=True, slots=True)
class CompiledDimension:
    variable: str
    name: str
    start_index: int
    item_count: int

    @property
    def stop_index(self) -> int:
        return self.start_index + self.item_count

    @property
    def question_labels(self) -> Tuple[str, ...]:
        """``P1``-style labels numbered by global column position."""
        return tuple(f"P{col + 1}" for col in range(self.start_index, self.stop_index))

    @property
    def question_span(self) -> str:
        labels = self.question_labels
        if not labels:
            return ""
        if len(labels) == 1:
            return labels[0]
        return f"{labels[0]}-{labels[-1]}"


@dataclass(frozen=True, slots=True)
class CompiledVariable:
    name: str
    start_index: int
    item_count: int
    dimensions: Tuple[CompiledDimension, ...]


@dataclass(frozen=True, slots=True)
class CompiledSchema:
    variables: Tuple[CompiledVariable, ...]
    total_columns: int

    @property
    def dimensions(self) -> Tuple[CompiledDimension, ...]:
        return tuple(dim for variable in self.variables for dim in variable.dimensions)


@dataclass(frozen=True, slots=True)
class SubjectRow:
    id: int
    values: Tuple[float, ...]


@dataclass(frozen=True, slots=True)
class SubjectSummary:
    subject_id: int
    dimension_values: Tuple[float, ...]
    variable_totals: Tuple[float, ...]


@dataclass(frozen=True, slots=True)
class SurveySummary:
    mode: SummaryMode
    headers: Tuple[str, ...]
    rows: Tuple[SubjectSummary, ...]
    dimension_counts: Tuple[int, ...] = ()

    def as_rows(self) -> list[list[float]]:
        """Flatten to export order: each variable's dimensions, then its total."""
        flat = []
        for row in self.rows:
            cells: list[float] = [row.subject_id]
            dims = iter(row.dimension_values)
            for total, n_dims in zip(row.variable_totals, self.dimension_counts):
                cells.extend(next(dims) for _ in range(n_dims))
                cells.append(total)
            flat.append(cells)
        return flat


@dataclass(frozen=True, slots=True)
class ColumnMismatch:
    detected_columns: int
    expected_columns: int


def compile_schema(schema: VariableSchema | Sequence[Variable]) -> CompiledSchema:
    """Assign column offsets with one left-to-right pass over the declaration."""

    variables = schema.variables if isinstance(schema, VariableSchema) else tuple(schema)
    offset = 0
    compiled_variables = []
    for variable in variables:
        variable_start = offset
        compiled_dims = []
        for dim in variable.dimensions:
            compiled_dims.append(
                CompiledDimension(
                    variable=variable.name,
                    name=dim.name,
                    start_index=offset,
                    item_count=dim.item_count,
                )
            )
            offset += dim.item_count
        compiled_variables.append(
            CompiledVariable(
                name=variable.name,
                start_index=variable_start,
                item_count=offset - variable_start,
                dimensions=tuple(compiled_dims),
            )
        )
    return CompiledSchema(variables=tuple(compiled_variables), total_columns=offset)


def uniform_schema(
    dimension_count: int,
    items_per_dimension: int,
    variable_name: str = "Main variable",
) -> VariableSchema:
    """One variable with ``D1..Dn`` dimensions of equal size."""

    dimensions = tuple(
        Dimension(name=f"D{i + 1}", item_count=max(items_per_dimension, 0))
        for i in range(max(dimension_count, 0))
    )
    return VariableSchema(variables=(Variable(name=variable_name, dimensions=dimensions),))


def detect_mismatch(table: Sequence[Sequence[Any]], compiled: CompiledSchema) -> Optional[ColumnMismatch]:
    """Compare the widest row of ``table`` against the schema's column count."""

    detected = max((len(row) for row in table), default=0)
    if detected == compiled.total_columns:
        return None
    return ColumnMismatch(detected_columns=detected, expected_columns=compiled.total_columns)


def load_subjects(table: Sequence[Sequence[Any]], compiled: CompiledSchema) -> Tuple[SubjectRow, ...]:
    """Turn an imported table into subject rows sized to the schema.

    Row 0 is a header and is discarded. Cells coerce to float (non-numeric
    becomes 0); rows are truncated or zero-padded to ``total_columns``.
    """
    width = compiled.total_columns
    subjects = []
    for idx, raw_row in enumerate(table[1:], start=1):
        values = [parse_float_or_zero(cell) for cell in list(raw_row)[:width]]
        values.extend([0.0] * (width - len(values)))
        subjects.append(SubjectRow(id=idx, values=tuple(values)))
    return tuple(subjects)


def _reduce(values: Sequence[float], item_count: int, mode: SummaryMode) -> float:
    total = float(sum(values))
    if mode is SummaryMode.SUM:
        return total
    return safe_round(safe_div(total, item_count, default=0.0), decimals=AVERAGE_DECIMALS)


def summary_headers(compiled: CompiledSchema, mode: SummaryMode) -> Tuple[str, ...]:
    headers = ["Subject"]
    for variable in compiled.variables:
        headers.extend(f"{variable.name} - {dim.name} ({mode.header_suffix})" for dim in variable.dimensions)
        headers.append(f"{variable.name} - TOTAL")
    return tuple(headers)


@measure_time("engine.survey.aggregate")
def aggregate(
    subjects: Sequence[SubjectRow],
    compiled: CompiledSchema,
    mode: SummaryMode = SummaryMode.AVERAGE,
) -> SurveySummary:
    """Reduce each subject to per-dimension and per-variable scores.

    The variable total always reduces the variable's raw item values
    directly, so in average mode it is the mean over all of its items, not
    the mean of its dimension averages.
    """
    rows = []
    for subject in subjects:
        dimension_values = []
        variable_totals = []
        for variable in compiled.variables:
            for dim in variable.dimensions:
                dimension_values.append(
                    _reduce(subject.values[dim.start_index:dim.stop_index], dim.item_count, mode)
                )
            item_values = subject.values[variable.start_index:variable.start_index + variable.item_count]
            variable_totals.append(_reduce(item_values, variable.item_count, mode))
        rows.append(
            SubjectSummary(
                subject_id=subject.id,
                dimension_values=tuple(dimension_values),
                variable_totals=tuple(variable_totals),
            )
        )
    return SurveySummary(
        mode=mode,
        headers=summary_headers(compiled, mode),
        rows=tuple(rows),
        dimension_counts=tuple(len(variable.dimensions) for variable in compiled.variables),
    )
