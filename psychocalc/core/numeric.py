"""Cell coercion and safe arithmetic helpers.

Every data-entry boundary (manual cell edits, spreadsheet imports, config
fields) goes through these functions so the permissive coercion policy lives
in one place:

- ``parse_int_or_zero`` for integer contexts (Aiken matrix, scale values,
  item counts)
- ``parse_float_or_zero`` for float contexts (survey and Cronbach data)
- ``parse_float_or_none`` where a non-numeric cell must pass through
  untouched (Likert recoding)

Strings are read by their leading numeric prefix, so ``"4 (agree)"`` parses
as 4 and ``"3.7"`` as 3 in integer context. Booleans, blanks and non-finite
values are treated as non-numeric.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal, ROUND_HALF_UP, ROUND_HALF_EVEN
from typing import Any, Optional

__all__ = [
    "parse_int_or_zero",
    "parse_float_or_zero",
    "parse_float_or_none",
    "safe_round",
    "safe_div",
    "is_integral",
]


_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_float_or_none(value: Any) -> Optional[float]:
    """Return the numeric reading of ``value`` or None when it has none.

    Example:
        >>> parse_float_or_none("2.5")
        2.5
        >>> parse_float_or_none(" 4 puntos")
        4.0
        >>> parse_float_or_none("n/a") is None
        True
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        result = float(value)
    else:
        match = _FLOAT_PREFIX.match(str(value))
        if match is None:
            return None
        try:
            result = float(match.group(1))
        except ValueError:
            return None
    if not math.isfinite(result):
        return None
    return result


def parse_float_or_zero(value: Any) -> float:
    """Float coercion defaulting to 0.0 for anything non-numeric."""

    parsed = parse_float_or_none(value)
    return 0.0 if parsed is None else parsed


def parse_int_or_zero(value: Any) -> int:
    """Integer coercion defaulting to 0, truncating toward zero.

    Example:
        >>> parse_int_or_zero("3.7")
        3
        >>> parse_int_or_zero(2.9)
        2
        >>> parse_int_or_zero("")
        0
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal)):
        return int(value) if math.isfinite(float(value)) else 0
    match = _INT_PREFIX.match(str(value))
    if match is None:
        return 0
    return int(match.group(1))


def safe_round(value: float, decimals: int = 2, method: str = "half_up") -> float:
    """Round through Decimal so ``2.675`` becomes 2.68 rather than 2.67.

    Non-finite values are returned unchanged.
    """
    rounding_methods = {
        "half_up": ROUND_HALF_UP,
        "half_even": ROUND_HALF_EVEN,
    }
    if method not in rounding_methods:
        raise ValueError(f"Invalid rounding method: {method}. Use 'half_up' or 'half_even'.")
    if not math.isfinite(value):
        return value
    quantizer = Decimal(10) ** -decimals
    rounded = Decimal(str(value)).quantize(quantizer, rounding=rounding_methods[method])
    return float(rounded)


def safe_div(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning ``default`` when the denominator is zero."""

    if denominator == 0:
        return default
    return numerator / denominator


def is_integral(value: float) -> bool:
    return math.isfinite(value) and float(value).is_integer()
