"""Centralized constants for the psychometric calculators.

All thresholds and bands are fixed domain conventions. They are immutable
(Final) and documented with their source.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Final, Mapping, Tuple

__all__ = [
    "AIKEN_CONFIDENCE_LEVELS",
    "AIKEN_THRESHOLD_DEFAULT",
    "AIKEN_THRESHOLD_STRICT",
    "AIKEN_STRICT_CONFIDENCE",
    "AIKEN_DISPLAY_DECIMALS",
    "ALPHA_BANDS",
    "MIN_ALPHA_ITEMS",
    "MIN_SCALE_OPTIONS",
    "LEVEL_COUNT_MIN",
    "LEVEL_COUNT_MAX",
    "LEVEL_TEMPLATES",
    "AVERAGE_DECIMALS",
    "DEFAULT_SCALE",
]

# =============================================================================
# Aiken's V
# =============================================================================

AIKEN_CONFIDENCE_LEVELS: Final[Tuple[float, float]] = (0.95, 0.99)

AIKEN_STRICT_CONFIDENCE: Final[float] = 0.99

AIKEN_THRESHOLD_DEFAULT: Final[float] = 0.70
"""Cut-off used at 95% confidence.

A fixed convention, not a cut-off derived from Aiken's binomial tables.
"""

AIKEN_THRESHOLD_STRICT: Final[float] = 0.80
"""Cut-off used at 99% confidence."""

AIKEN_DISPLAY_DECIMALS: Final[int] = 3

MIN_SCALE_OPTIONS: Final[int] = 2

DEFAULT_SCALE: Final[Tuple[Tuple[str, int], ...]] = (
    ("Nada", 0),
    ("Poco", 1),
    ("Mucho", 2),
)
"""Three-point relevance scale offered when a new Aiken workspace opens."""

# =============================================================================
# Cronbach's alpha
# =============================================================================

MIN_ALPHA_ITEMS: Final[int] = 2

ALPHA_BANDS: Final[Tuple[Tuple[float, str], ...]] = (
    (0.81, "Very high"),
    (0.61, "High"),
    (0.41, "Medium"),
    (0.21, "Low"),
)
"""Palella & Martins (2012) reliability bands, checked in order.

Anything below the last lower bound is "Very low".
"""

# =============================================================================
# Baremos
# =============================================================================

LEVEL_COUNT_MIN: Final[int] = 2
LEVEL_COUNT_MAX: Final[int] = 5

LEVEL_TEMPLATES: Final[Mapping[int, Tuple[str, ...]]] = MappingProxyType(
    {
        2: ("Low", "High"),
        3: ("Low", "Medium", "High"),
        4: ("Very low", "Low", "High", "Very high"),
        5: ("Very low", "Low", "Average", "High", "Very high"),
    }
)
"""Default qualitative level names per level count (English codes)."""

# =============================================================================
# Survey aggregation
# =============================================================================

AVERAGE_DECIMALS: Final[int] = 2
