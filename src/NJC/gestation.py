"""
Gestational age domain model.

Defines the GestationalAge dataclass (completed weeks + extra days) and the
lenient integer parsing used for form-style inputs.
"""

import re
import typing
from dataclasses import dataclass

# Leading integer of a string, the way a number field hands it over ("39", " 39", "39.5")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def is_blank(value: typing.Any) -> bool:
    """True for None, NaN and strings that hold only whitespace."""
    if value is None:
        return True
    if isinstance(value, float) and value != value:
        return True
    return isinstance(value, str) and not value.strip()


def parse_int(value: typing.Any) -> typing.Optional[int]:
    """
    Parse the leading integer of `value`.

    - ints pass through, floats are truncated toward zero
    - strings yield their leading integer ("39.5" -> 39)
    - None, blank or non-numeric text -> None
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value:  # NaN
            return None
        return int(value)
    m = _LEADING_INT.match(str(value))
    if not m:
        return None
    return int(m.group(1))


@dataclass(frozen=True)
class GestationalAge:
    """
    Represents a gestational age at birth.

    Attributes:
        weeks: Completed weeks of gestation.
        days: Extra days beyond the completed weeks (normally 0-6).
    """

    weeks: int
    days: int = 0

    @property
    def total_weeks(self) -> float:
        return self.weeks + self.days / 7

    @classmethod
    def from_inputs(
        cls, weeks: typing.Any, days: typing.Any
    ) -> typing.Optional["GestationalAge"]:
        """
        Build from raw weeks/days inputs.
        Returns None when both are unset; an unparseable part counts as 0.
        """
        if is_blank(weeks) and is_blank(days):
            return None
        return cls(weeks=parse_int(weeks) or 0, days=parse_int(days) or 0)
