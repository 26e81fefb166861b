"""Baremo (range table) generation.

Each structural component (a dimension, or a variable's synthetic total)
with ``k`` items on an item scale ``[min, max]`` spans raw scores
``[k*min, k*max]``. That span is cut into ``N`` equal-width qualitative
levels and snapped to contiguous integer bands:

    interval = (max_raw - min_raw) / N
    upper(i) = floor(min_raw + interval * (i + 1))   # last level: max_raw
    lower(i) = min_raw if i == 0 else floor(min_raw + interval * i) + 1

The interval is kept as an exact fraction so cut points never drift below
an integer boundary through float rounding.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from fractions import Fraction
from typing import Sequence, Tuple

from psychocalc.calculators.constants import LEVEL_COUNT_MAX, LEVEL_COUNT_MIN, LEVEL_TEMPLATES
from psychocalc.calculators.survey import Variable
from psychocalc.core.errors import ValidationError
from psychocalc.core.metrics import measure_time

__all__ = [
    "ItemScale",
    "RangeLevel",
    "BaremoRow",
    "BaremoTable",
    "resolve_level_names",
    "partition_range",
    "generate_baremos",
    "generated_level_flags",
    "TOTAL_COMPONENT_TEMPLATE",
    "DEFAULT_LEVEL_TEMPLATE",
]

TOTAL_COMPONENT_TEMPLATE = "TOTAL ({variable})"
DEFAULT_LEVEL_TEMPLATE = "Level {n}"


@dataclass(frozen=True, slots=True)
class ItemScale:
    min: int
    max: int


@dataclass(frozen=True, slots=True)
class RangeLevel:
    label: str
    lower_bound: int
    upper_bound: int

    @property
    def display(self) -> str:
        return f"{self.lower_bound} - {self.upper_bound}"


@dataclass(frozen=True, slots=True)
class BaremoRow:
    variable: str
    component: str
    item_count: int
    min_raw: int
    max_raw: int
    levels: Tuple[RangeLevel, ...]
    is_total: bool = False


@dataclass(frozen=True, slots=True)
class BaremoTable:
    """``generated[i]`` is True when label ``i`` is a template or fallback code, not a caller name."""

    level_names: Tuple[str, ...]
    rows: Tuple[BaremoRow, ...]
    generated: Tuple[bool, ...] = ()

    @property
    def headers(self) -> list[str]:
        return ["Component", *self.level_names]

    def as_rows(self) -> list[list[str]]:
        return [[row.component, *(level.display for level in row.levels)] for row in self.rows]


def _check_level_count(level_count: int) -> None:
    if not LEVEL_COUNT_MIN <= level_count <= LEVEL_COUNT_MAX:
        raise ValidationError(
            f"Level count must be between {LEVEL_COUNT_MIN} and {LEVEL_COUNT_MAX}",
            detail={"level_count": level_count},
        )


def resolve_level_names(level_count: int, names: Sequence[str] | None = None) -> Tuple[str, ...]:
    """Fill level labels: caller names first, then ``DEFAULT_LEVEL_TEMPLATE``.

    ``names=None`` selects the default template for the level count.
    """
    _check_level_count(level_count)
    if names is None:
        names = LEVEL_TEMPLATES[level_count]
    return tuple(
        names[i] if i < len(names) and names[i] else DEFAULT_LEVEL_TEMPLATE.format(n=i + 1)
        for i in range(level_count)
    )


def generated_level_flags(level_count: int, names: Sequence[str] | None = None) -> Tuple[bool, ...]:
    """Which labels ``resolve_level_names`` fills in itself rather than taking from ``names``."""

    if names is None:
        return (True,) * level_count
    return tuple(not (i < len(names) and names[i]) for i in range(level_count))


def partition_range(min_raw: int, max_raw: int, level_names: Sequence[str]) -> Tuple[RangeLevel, ...]:
    """Cut ``[min_raw, max_raw]`` into ``len(level_names)`` contiguous bands."""

    level_count = len(level_names)
    interval = Fraction(max_raw - min_raw, level_count)
    levels = []
    for i, label in enumerate(level_names):
        upper = max_raw if i == level_count - 1 else math.floor(min_raw + interval * (i + 1))
        lower = min_raw if i == 0 else math.floor(min_raw + interval * i) + 1
        levels.append(RangeLevel(label=label, lower_bound=lower, upper_bound=upper))
    return tuple(levels)


@measure_time("engine.baremos")
def generate_baremos(
    item_scale: ItemScale,
    variables: Sequence[Variable],
    level_count: int,
    level_names: Sequence[str] | None = None,
) -> BaremoTable:
    """Build the range table: one row per dimension plus one total per variable.

    Args:
        item_scale: Minimum and maximum score of a single item (e.g. 1-5).
        variables: Declared variables with their dimensions and item counts.
        level_count: Number of qualitative levels, 2 to 5.
        level_names: Labels in order; missing ones default to ``Level {i+1}``.
    """
    names = resolve_level_names(level_count, level_names)
    rows: list[BaremoRow] = []
    for variable in variables:
        components = [(dim.name, dim.item_count, False) for dim in variable.dimensions]
        components.append(
            (
                TOTAL_COMPONENT_TEMPLATE.format(variable=variable.name),
                sum(dim.item_count for dim in variable.dimensions),
                True,
            )
        )
        for component, item_count, is_total in components:
            min_raw = item_count * item_scale.min
            max_raw = item_count * item_scale.max
            rows.append(
                BaremoRow(
                    variable=variable.name,
                    component=component,
                    item_count=item_count,
                    min_raw=min_raw,
                    max_raw=max_raw,
                    levels=partition_range(min_raw, max_raw, names),
                    is_total=is_total,
                )
            )
    return BaremoTable(
        level_names=names,
        rows=tuple(rows),
        generated=generated_level_flags(level_count, level_names),
    )
