"""Enumerations for tool identifiers and categorical results."""

from __future__ import annotations

from enum import Enum

__all__ = [
    "ToolId",
    "Verdict",
    "SummaryMode",
    "CronbachMode",
]


class ToolId(str, Enum):
    """Calculators available in the suite.

    Usage:
        >>> ToolId("aiken") is ToolId.AIKEN
        True
    """

    AIKEN = "aiken"
    CRONBACH = "cronbach"
    RANGES = "ranges"
    SURVEY = "survey"
    RECODE = "recode"

    def __str__(self) -> str:
        return self.value


class Verdict(str, Enum):
    VALID = "Valid"
    REVIEW = "Review"

    def __str__(self) -> str:
        return self.value


class SummaryMode(str, Enum):
    """Per-dimension reduction applied by the survey aggregator."""

    SUM = "sum"
    AVERAGE = "average"

    @property
    def header_suffix(self) -> str:
        return "Sum" if self is SummaryMode.SUM else "Avg"


class CronbachMode(str, Enum):
    GLOBAL = "global"
    VARIABLES = "variables"
