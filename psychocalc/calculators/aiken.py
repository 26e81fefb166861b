"""Aiken's V content-validity coefficient.

Formula:
    V = (mean - lo) / (hi - lo)

Where:
    mean = average rating an item received across judges
    lo, hi = minimum and maximum values of the rating scale

This is equivalent to the common ``S / (n * (c - 1))`` form with
``S = Σ(x - lo)``. Items whose V reaches the confidence-dependent threshold
are marked ``Valid``; the rest ``Review``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

from psychocalc.calculators.constants import (
    AIKEN_CONFIDENCE_LEVELS,
    AIKEN_DISPLAY_DECIMALS,
    AIKEN_STRICT_CONFIDENCE,
    AIKEN_THRESHOLD_DEFAULT,
    AIKEN_THRESHOLD_STRICT,
)
from psychocalc.calculators.enums import Verdict
from psychocalc.calculators.matrix import ResponseMatrix
from psychocalc.calculators.scale import RatingScale
from psychocalc.core.errors import ValidationError
from psychocalc.core.formatting import format_fixed
from psychocalc.core.metrics import measure_time
from psychocalc.core.numeric import safe_div

__all__ = [
    "AikenItemResult",
    "AikenReport",
    "threshold_for",
    "compute_aiken",
]


@dataclass(frozen=True, slots=True)
class AikenItemResult:
    item_index: int
    mean: float
    v: float
    verdict: Verdict

    @property
    def v_display(self) -> str:
        return format_fixed(self.v, decimals=AIKEN_DISPLAY_DECIMALS)


@dataclass(frozen=True, slots=True)
class AikenReport:
    items: Tuple[AikenItemResult, ...]
    lo: int
    hi: int
    threshold: float
    confidence: float

    @property
    def valid_count(self) -> int:
        return sum(1 for item in self.items if item.verdict is Verdict.VALID)


def threshold_for(confidence: float) -> float:
    """Return the V cut-off for a confidence level (0.95 or 0.99)."""

    if not any(math.isclose(confidence, level) for level in AIKEN_CONFIDENCE_LEVELS):
        raise ValidationError(
            "Confidence must be 0.95 or 0.99",
            detail={"confidence": confidence},
        )
    return AIKEN_THRESHOLD_STRICT if math.isclose(confidence, AIKEN_STRICT_CONFIDENCE) else AIKEN_THRESHOLD_DEFAULT


@measure_time("engine.aiken")
def compute_aiken(matrix: ResponseMatrix, scale: RatingScale, confidence: float = 0.95) -> AikenReport:
    """Compute V for every item row of ``matrix``.

    Args:
        matrix: Items x judges ratings.
        scale: Rating scale; only its min and max values matter.
        confidence: 0.95 (threshold 0.70) or 0.99 (threshold 0.80).

    Returns:
        AikenReport with one result per row, in row order.

    Note:
        A scale whose min equals its max yields NaN coefficients (every item
        is then marked Review). Callers are expected to check
        ``scale.is_usable`` first and skip the calculation.
    """
    threshold = threshold_for(confidence)
    lo, hi = scale.lo, scale.hi
    spread = hi - lo
    judges = matrix.column_count

    items = []
    for idx, row in enumerate(matrix.rows):
        mean = safe_div(sum(row), judges, default=math.nan)
        v = safe_div(mean - lo, spread, default=math.nan)
        # NaN compares False, so degenerate inputs land on Review.
        verdict = Verdict.VALID if v >= threshold else Verdict.REVIEW
        items.append(AikenItemResult(item_index=idx + 1, mean=mean, v=v, verdict=verdict))

    return AikenReport(
        items=tuple(items),
        lo=lo,
        hi=hi,
        threshold=threshold,
        confidence=confidence,
    )
