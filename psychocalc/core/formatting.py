"""Formatting helpers shared by result tables and exports."""

from __future__ import annotations

import math
from typing import Any, Optional

from psychocalc.core.numeric import is_integral, safe_round

__all__ = ["format_decimal", "format_fixed", "format_cell"]


def format_decimal(value: Optional[float], *, decimals: int = 2) -> Optional[float]:
    """Safely round a nullable float value using the shared numeric helpers."""

    if value is None:
        return None
    return safe_round(value, decimals=decimals)


def format_fixed(value: Optional[float], *, decimals: int = 3) -> str:
    """Fixed-point display string, e.g. ``0.8333 -> "0.833"``."""

    if value is None or not math.isfinite(value):
        return "NaN"
    return f"{safe_round(value, decimals=decimals):.{decimals}f}"


def format_cell(value: Any) -> str:
    """Render a table cell for text exports; integral floats drop the ``.0``."""

    if value is None:
        return ""
    if isinstance(value, float):
        if is_integral(value):
            return str(int(value))
        return str(value)
    return str(value)
