from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Iterable, Iterator, Tuple

from psychocalc.calculators.constants import DEFAULT_SCALE, MIN_SCALE_OPTIONS
from psychocalc.core.errors import ScaleTooSmallError
from psychocalc.core.numeric import parse_int_or_zero

__all__ = ["ScaleOption", "RatingScale", "NEW_OPTION_LABEL"]

NEW_OPTION_LABEL = "New option"


@dataclass(frozen=True, slots=True)
class ScaleOption:
    label: str
    value: int


@dataclass(frozen=True, slots=True)
class RatingScale:
    """Ordered (label, value) pairs; values need not be sorted or contiguous."""

    options: Tuple[ScaleOption, ...]

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[str, Any]]) -> "RatingScale":
        return cls(tuple(ScaleOption(str(label), parse_int_or_zero(value)) for label, value in pairs))

    @classmethod
    def default(cls) -> "RatingScale":
        return cls.from_pairs(DEFAULT_SCALE)

    @property
    def lo(self) -> int:
        return min(option.value for option in self.options)

    @property
    def hi(self) -> int:
        return max(option.value for option in self.options)

    @property
    def spread(self) -> int:
        """``hi - lo``; zero means the scale cannot normalise ratings."""
        if not self.options:
            return 0
        return self.hi - self.lo

    @property
    def is_usable(self) -> bool:
        return len(self.options) >= MIN_SCALE_OPTIONS and self.spread != 0

    def with_option(self, label: str | None = None, value: Any = None) -> "RatingScale":
        """Append an option; by default one step above the last option's value."""
        if value is None:
            next_value = self.options[-1].value + 1 if self.options else 0
        else:
            next_value = parse_int_or_zero(value)
        return RatingScale(self.options + (ScaleOption(label or NEW_OPTION_LABEL, next_value),))

    def without_option(self, index: int) -> "RatingScale":
        self._check_index(index)
        if len(self.options) <= MIN_SCALE_OPTIONS:
            raise ScaleTooSmallError()
        return RatingScale(self.options[:index] + self.options[index + 1:])

    def with_edit(self, index: int, *, label: str | None = None, value: Any = None) -> "RatingScale":
        self._check_index(index)
        option = self.options[index]
        if label is not None:
            option = replace(option, label=label)
        if value is not None:
            option = replace(option, value=parse_int_or_zero(value))
        return RatingScale(self.options[:index] + (option,) + self.options[index + 1:])

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.options):
            raise IndexError(f"Scale option {index} does not exist")

    def __iter__(self) -> Iterator[ScaleOption]:
        return iter(self.options)

    def __len__(self) -> int:
        return len(self.options)
