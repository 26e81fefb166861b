r"""
Cronbach's alpha for internal consistency.

Formula:
    α = (k / (k-1)) × (1 - Σσ²ᵢ / σ²ₜ)

Where:
    k = number of items in the evaluated column range
    σ²ᵢ = sample variance (n - 1) of item i across subjects
    σ²ₜ = sample variance of per-subject totals over the range

When σ²ₜ is zero (every subject has the same total) alpha is reported as 0
instead of failing on the division.

Ranges are 1-based and inclusive, matching how users number questionnaire
columns. "Global" mode spans every column; "variables" mode evaluates each
declared range independently, so one bad range only flags its own row.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence, Tuple, Union, TYPE_CHECKING

from psychocalc.calculators.constants import ALPHA_BANDS, MIN_ALPHA_ITEMS
from psychocalc.core.errors import InvalidRangeError
from psychocalc.core.logging import get_logger
from psychocalc.core.metrics import measure_time
from psychocalc.core.numeric import parse_float_or_zero

if TYPE_CHECKING:  # pragma: no cover
    from numpy.typing import NDArray

__all__ = [
    "VariableRange",
    "CronbachResult",
    "CronbachRowError",
    "interpret_alpha",
    "load_subject_table",
    "cronbach_subset",
    "cronbach_global",
    "cronbach_by_variables",
]

logger = get_logger("psychocalc.calculators.cronbach", component="engine")

_NUMPY_MODULE = None


def _require_numpy():
    """Import numpy lazily so non-Cronbach workloads skip the module load."""

    global _NUMPY_MODULE
    if _NUMPY_MODULE is None:
        import numpy as np  # type: ignore[import-not-found]

        _NUMPY_MODULE = np
    return _NUMPY_MODULE


@dataclass(frozen=True, slots=True)
class VariableRange:
    """A named 1-based inclusive column range."""

    name: str
    start: int
    end: int


@dataclass(frozen=True, slots=True)
class CronbachResult:
    label: str
    start: int
    end: int
    n_items: int
    n_subjects: int
    sum_item_variances: float
    total_variance: float
    alpha: float
    interpretation: str


@dataclass(frozen=True, slots=True)
class CronbachRowError:
    label: str
    start: int
    end: int
    error: str


CronbachRow = Union[CronbachResult, CronbachRowError]


def interpret_alpha(alpha: float) -> str:
    """Map alpha to its Palella & Martins band.

    Example:
        >>> interpret_alpha(0.85)
        'Very high'
        >>> interpret_alpha(0.61)
        'High'
        >>> interpret_alpha(0.05)
        'Very low'
    """
    for lower_bound, label in ALPHA_BANDS:
        if alpha >= lower_bound:
            return label
    return "Very low"


def load_subject_table(table: Sequence[Sequence[Any]]) -> Tuple[Tuple[float, ...], ...]:
    """Drop the header row and coerce the remaining cells to floats.

    Rows are zero-padded to the widest row so every subject has a value for
    every column.
    """
    body = [list(row) for row in table[1:]]
    width = max((len(row) for row in body), default=0)
    return tuple(
        tuple(parse_float_or_zero(cell) for cell in row) + (0.0,) * (width - len(row))
        for row in body
    )


def _column_block(rows: Sequence[Sequence[float]], start: int, end: int) -> "NDArray":
    np = _require_numpy()
    block = np.zeros((len(rows), end - start + 1), dtype=float)
    for r_idx, row in enumerate(rows):
        cells = list(row)[start - 1:end]
        if cells:
            block[r_idx, : len(cells)] = cells
    return block


def _sample_variance(values: "NDArray", axis: int | None = None):
    np = _require_numpy()
    n = values.shape[0]
    if n < 2:
        shape = values.shape[1:] if axis == 0 else ()
        return np.zeros(shape, dtype=float) if shape else 0.0
    return np.var(values, axis=axis, ddof=1)


def _validate_range(start: int, end: int) -> int:
    n_items = end - start + 1
    if start < 1 or n_items < MIN_ALPHA_ITEMS:
        raise InvalidRangeError(detail={"start": start, "end": end, "n_items": max(n_items, 0)})
    return n_items


@measure_time("engine.cronbach")
def cronbach_subset(
    rows: Sequence[Sequence[float]],
    start: int,
    end: int,
    *,
    label: str | None = None,
) -> CronbachResult:
    """Compute alpha over columns ``start..end`` (1-based, inclusive).

    Raises:
        InvalidRangeError: when the range holds fewer than two items or
            starts before column 1.
    """
    n_items = _validate_range(start, end)
    block = _column_block(rows, start, end)
    n_subjects = block.shape[0]

    sum_item_variances = float(_sample_variance(block, axis=0).sum()) if n_subjects else 0.0
    totals = block.sum(axis=1)
    total_variance = float(_sample_variance(totals)) if n_subjects else 0.0

    if total_variance > 0:
        alpha = (n_items / (n_items - 1)) * (1 - sum_item_variances / total_variance)
    else:
        alpha = 0.0

    return CronbachResult(
        label=label or f"{start}-{end}",
        start=start,
        end=end,
        n_items=n_items,
        n_subjects=n_subjects,
        sum_item_variances=sum_item_variances,
        total_variance=total_variance,
        alpha=float(alpha),
        interpretation=interpret_alpha(float(alpha)),
    )


def cronbach_global(rows: Sequence[Sequence[float]], *, label: str = "Global") -> CronbachResult:
    """Alpha over every column; column 1 is taken as the first data column."""

    width = max((len(row) for row in rows), default=0)
    return cronbach_subset(rows, 1, width, label=label)


def cronbach_by_variables(
    rows: Sequence[Sequence[float]],
    ranges: Sequence[VariableRange],
) -> Tuple[CronbachRow, ...]:
    """Evaluate each declared range on its own; invalid ranges become error rows."""

    results: list[CronbachRow] = []
    for declared in ranges:
        try:
            results.append(cronbach_subset(rows, declared.start, declared.end, label=declared.name))
        except InvalidRangeError as exc:
            logger.info(
                "cronbach_range_rejected",
                extra={"structured_data": {"variable": declared.name, "start": declared.start, "end": declared.end}},
            )
            results.append(
                CronbachRowError(label=declared.name, start=declared.start, end=declared.end, error=exc.message)
            )
    return tuple(results)
