"""
Clinical calibration tables.

Phototherapy and exchange-transfusion thresholds (AAP 2004, infants >= 35
weeks) and the Bhutani hour-specific bilirubin nomogram, held as ordered,
immutable tuples of points. Breakpoints must be strictly increasing.

Two calibration sets are defined and selected by name:

  aap2004-12h : refined curves read at 12-hour intervals from 12 h, with a
                widened 96-120 h final interval. Default.
  aap2004-24h : coarse 24-hour curves from 24 h. The Bhutani zone is
                reported from 18 h, extrapolating the first 24-36 h segment
                backwards.

The sets must never be mixed within one evaluation.
"""

import os
import typing
from dataclasses import dataclass

from .risk import RiskTag

CALIBRATION_ENV_VAR = "NJC_CALIBRATION"


@dataclass(frozen=True)
class CurvePoint:
    """
    One breakpoint of a risk-tiered threshold curve.

    Attributes:
        hours: Hours of life at this breakpoint.
        low: Threshold (mg/dL) for low-risk neonates.
        med: Threshold (mg/dL) for medium-risk neonates.
        high: Threshold (mg/dL) for high-risk neonates.
    """

    hours: float
    low: float
    med: float
    high: float

    def value_for(self, tag: RiskTag) -> float:
        if tag is RiskTag.LOW:
            return self.low
        if tag is RiskTag.MED:
            return self.med
        if tag is RiskTag.HIGH:
            return self.high
        raise ValueError(f"No curve column for risk tag {tag!r}")


@dataclass(frozen=True)
class PercentilePoint:
    """
    One breakpoint of the Bhutani nomogram.

    Attributes:
        hours: Hours of life at this breakpoint.
        p40: 40th percentile bilirubin (mg/dL).
        p75: 75th percentile bilirubin (mg/dL).
        p95: 95th percentile bilirubin (mg/dL).
    """

    hours: float
    p40: float
    p75: float
    p95: float


@dataclass(frozen=True)
class Calibration:
    name: str
    phototherapy: typing.Tuple[CurvePoint, ...]
    exchange_transfusion: typing.Tuple[CurvePoint, ...]
    bhutani: typing.Tuple[PercentilePoint, ...]
    # below this hour the nomogram zone is not reported
    bhutani_early_cutoff: float
    description: str = ""


# --- AAP 2004, 12-hour intervals ---------------------------------------------

PHOTOTHERAPY_12H = (
    CurvePoint(12, 9.0, 7.5, 6.0),
    CurvePoint(24, 12.0, 10.0, 8.0),
    CurvePoint(36, 13.5, 11.5, 9.5),
    CurvePoint(48, 15.0, 13.0, 11.0),
    CurvePoint(60, 16.5, 14.0, 12.0),
    CurvePoint(72, 18.0, 15.0, 13.0),
    CurvePoint(84, 19.5, 16.5, 14.0),
    CurvePoint(96, 20.5, 17.5, 14.5),
    CurvePoint(120, 21.0, 18.0, 15.0),
)

EXCHANGE_TRANSFUSION_12H = (
    CurvePoint(12, 17.0, 15.0, 13.0),
    CurvePoint(24, 19.0, 17.0, 15.0),
    CurvePoint(36, 20.5, 18.5, 16.5),
    CurvePoint(48, 22.0, 20.0, 18.0),
    CurvePoint(60, 23.0, 21.0, 18.5),
    CurvePoint(72, 24.0, 22.0, 19.0),
    CurvePoint(84, 24.5, 23.0, 20.5),
    CurvePoint(96, 25.0, 24.0, 22.0),
    CurvePoint(120, 25.0, 24.0, 22.0),
)

BHUTANI_12H = (
    PercentilePoint(12, 3.0, 4.5, 6.0),
    PercentilePoint(24, 4.0, 6.0, 8.0),
    PercentilePoint(36, 5.5, 8.5, 11.5),
    PercentilePoint(48, 7.5, 10.5, 13.5),
    PercentilePoint(60, 9.5, 12.5, 15.5),
    PercentilePoint(72, 11.0, 14.5, 17.0),
    PercentilePoint(84, 12.5, 16.0, 18.5),
    PercentilePoint(96, 13.5, 17.0, 19.5),
    PercentilePoint(120, 15.0, 17.5, 19.5),
)

# --- AAP 2004, 24-hour intervals ---------------------------------------------

PHOTOTHERAPY_24H = (
    CurvePoint(24, 12, 10, 8),
    CurvePoint(48, 15, 13, 11),
    CurvePoint(72, 18, 15, 13),
    CurvePoint(96, 21, 18, 15),
    CurvePoint(120, 21, 18, 15),
)

EXCHANGE_TRANSFUSION_24H = (
    CurvePoint(24, 19, 17, 15),
    CurvePoint(48, 22, 20, 18),
    CurvePoint(72, 24, 22, 19),
    CurvePoint(96, 25, 24, 22),
    CurvePoint(120, 25, 24, 22),
)

BHUTANI_24H = (
    PercentilePoint(24, 4.0, 6.0, 8.0),
    PercentilePoint(36, 5.5, 8.5, 11.5),
    PercentilePoint(48, 7.5, 10.5, 13.5),
    PercentilePoint(60, 9.5, 12.5, 15.5),
    PercentilePoint(72, 11.0, 14.5, 17.0),
    PercentilePoint(96, 13.5, 17.0, 19.5),
)

AAP2004_12H = Calibration(
    name="aap2004-12h",
    phototherapy=PHOTOTHERAPY_12H,
    exchange_transfusion=EXCHANGE_TRANSFUSION_12H,
    bhutani=BHUTANI_12H,
    bhutani_early_cutoff=12,
    description="AAP 2004 curves at 12-hour intervals from 12 h",
)

AAP2004_24H = Calibration(
    name="aap2004-24h",
    phototherapy=PHOTOTHERAPY_24H,
    exchange_transfusion=EXCHANGE_TRANSFUSION_24H,
    bhutani=BHUTANI_24H,
    bhutani_early_cutoff=18,
    description="AAP 2004 curves at 24-hour intervals from 24 h",
)

CALIBRATIONS: typing.Dict[str, Calibration] = {
    AAP2004_12H.name: AAP2004_12H,
    AAP2004_24H.name: AAP2004_24H,
}

DEFAULT_CALIBRATION = AAP2004_12H


def get_calibration(name: typing.Optional[str] = None) -> Calibration:
    """
    Look up a calibration set by name.
    With no name, falls back to $NJC_CALIBRATION, then to the default set.
    """
    if name is None:
        name = os.environ.get(CALIBRATION_ENV_VAR) or DEFAULT_CALIBRATION.name
    key = name.strip().lower()
    try:
        return CALIBRATIONS[key]
    except KeyError:
        raise ValueError(
            f"Unknown calibration {name!r}; expected one of {sorted(CALIBRATIONS)}"
        )
