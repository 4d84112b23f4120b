"""
Curve evaluation.

Linear interpolation over the calibration tables:
- treatment thresholds (phototherapy, exchange transfusion) per risk tag
- Bhutani percentiles and the resulting risk zone
"""

import math
import typing
from enum import Enum

from .calibration import DEFAULT_CALIBRATION, CurvePoint, PercentilePoint
from .risk import RiskTag

T = typing.TypeVar("T", CurvePoint, PercentilePoint)


class BhutaniZone(Enum):
    TOO_EARLY = "N/A (Too Early)"
    PENDING_INPUT = "Pending Input"
    LOW = "Low Risk Zone"
    LOW_INTERMEDIATE = "Low Intermediate Risk Zone"
    HIGH_INTERMEDIATE = "High Intermediate Risk Zone"
    HIGH = "High Risk Zone"

    @property
    def label(self) -> str:
        return self.value


class Percentiles(typing.NamedTuple):
    p40: float
    p75: float
    p95: float


def interpolate(x: float, x0: float, y0: float, x1: float, y1: float) -> float:
    # x0 == x1 is a caller error; breakpoints are strictly increasing
    return y0 + (x - x0) * (y1 - y0) / (x1 - x0)


def round_to_half(value: float) -> float:
    """Round to the nearest 0.5, halves going up (13.25 -> 13.5)."""
    return math.floor(value * 2 + 0.5) / 2


def find_bracket(curve: typing.Sequence[T], hours: float) -> typing.Tuple[T, T]:
    """
    Return the pair of consecutive points (p0, p1) with p0.hours <= hours <= p1.hours.

    Breakpoints are not evenly spaced, so this is an ordered scan that takes
    the first match. At or past the last breakpoint the pair degenerates to
    (last, last). Before the first breakpoint the first segment is used.
    """
    last = curve[-1]
    if hours >= last.hours:
        return last, last
    for p0, p1 in zip(curve, curve[1:]):
        if p0.hours <= hours <= p1.hours:
            return p0, p1
    return curve[0], curve[1]


def _value_at(hours: float, p0_hours: float, y0: float, p1_hours: float, y1: float) -> float:
    # degenerate bracket is the plateau
    if p0_hours == p1_hours:
        return y0
    return interpolate(hours, p0_hours, y0, p1_hours, y1)


def get_limit(
    curve: typing.Sequence[CurvePoint],
    risk_tag: typing.Union[RiskTag, str],
    hol: typing.Optional[float],
) -> typing.Optional[float]:
    """
    Treatment threshold (mg/dL) for `risk_tag` at `hol` hours of life, rounded to 0.5.
    `risk_tag` may also be given as a label ("low", "MED", "medium", ...).

    Returns None if hol is unknown, hol is before the first breakpoint, or the
    tag is NA. Past the last breakpoint the last value is held (no extrapolation).
    """
    if isinstance(risk_tag, str):
        risk_tag = RiskTag.from_label(risk_tag)
    if hol is None or risk_tag is RiskTag.NA:
        return None
    if hol < curve[0].hours:
        return None

    p0, p1 = find_bracket(curve, hol)
    value = _value_at(hol, p0.hours, p0.value_for(risk_tag), p1.hours, p1.value_for(risk_tag))
    return round_to_half(value)


def bhutani_percentiles(
    hol: float, curve: typing.Sequence[PercentilePoint] = DEFAULT_CALIBRATION.bhutani
) -> Percentiles:
    """Interpolate the 40th, 75th and 95th percentiles independently on the same bracket."""
    p0, p1 = find_bracket(curve, hol)
    return Percentiles(
        p40=_value_at(hol, p0.hours, p0.p40, p1.hours, p1.p40),
        p75=_value_at(hol, p0.hours, p0.p75, p1.hours, p1.p75),
        p95=_value_at(hol, p0.hours, p0.p95, p1.hours, p1.p95),
    )


def zone_for_reading(reading: float, percentiles: Percentiles) -> BhutaniZone:
    # each band includes its lower percentile
    if reading < percentiles.p40:
        return BhutaniZone.LOW
    if reading < percentiles.p75:
        return BhutaniZone.LOW_INTERMEDIATE
    if reading < percentiles.p95:
        return BhutaniZone.HIGH_INTERMEDIATE
    return BhutaniZone.HIGH


def classify_bhutani_zone(
    hol: typing.Optional[float],
    bilirubin: typing.Optional[float],
    curve: typing.Sequence[PercentilePoint] = DEFAULT_CALIBRATION.bhutani,
    early_cutoff: float = DEFAULT_CALIBRATION.bhutani_early_cutoff,
) -> BhutaniZone:
    """
    Place a bilirubin reading on the Bhutani nomogram.

    - hol unknown or before `early_cutoff` -> TOO_EARLY
    - reading absent -> PENDING_INPUT
    - otherwise the band the reading falls in at this hour
    """
    if hol is None or hol < early_cutoff:
        return BhutaniZone.TOO_EARLY
    if bilirubin is None:
        return BhutaniZone.PENDING_INPUT
    return zone_for_reading(bilirubin, bhutani_percentiles(hol, curve))
