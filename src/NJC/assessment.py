"""
Assessment pipeline.

AssessmentInput carries the raw primitives a form or a table row supplies;
evaluate() derives every output from them in one explicit pass. Callers that
react to input changes simply call evaluate() again.
"""

from __future__ import annotations

import logging
import re
import typing
from dataclasses import dataclass

from stairval.notepad import Notepad

from .calibration import DEFAULT_CALIBRATION, Calibration
from .curves import BhutaniZone, Percentiles, bhutani_percentiles, classify_bhutani_zone, get_limit
from .gestation import GestationalAge, is_blank
from .risk import RiskCategory, RiskTag, classify_gestational_age
from .timing import compute_hours_of_life, hours_between, parse_timestamp

LOGGER = logging.getLogger(__name__)

# Leading decimal of a string ("7.5", "7.5 mg/dL", ".8")
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_bilirubin(value: typing.Any) -> typing.Optional[float]:
    """
    Parse a bilirubin reading in mg/dL.
    Missing, non-numeric or negative values -> None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        reading = float(value)
    else:
        m = _LEADING_FLOAT.match(str(value))
        if not m:
            return None
        reading = float(m.group(1))
    if reading != reading or reading < 0:
        return None
    return reading


@dataclass
class AssessmentInput:
    """
    Raw inputs for one assessment.

    Attributes:
        birth_date: Birth date, 'YYYY-MM-DD'.
        birth_time: Birth time, 'HH:MM' (24h).
        assessment_date: Assessment date, 'YYYY-MM-DD'.
        assessment_time: Assessment time, 'HH:MM' (24h).
        gestation_weeks: Completed weeks of gestation, or '' if not entered.
        gestation_days: Extra days (0-6), or '' if not entered.
        bilirubin: TcB/TSB reading in mg/dL, or '' if not measured.
        neurotoxicity_risk: True if any neurotoxicity risk factor is present
            (isoimmune disease, G6PD deficiency, asphyxia, sepsis, acidosis,
            albumin < 3.0 g/dL).
        patient_ID: Optional identifier, used by the table workflow.
    """

    birth_date: str = ""
    birth_time: str = ""
    assessment_date: str = ""
    assessment_time: str = ""
    gestation_weeks: typing.Any = ""
    gestation_days: typing.Any = ""
    bilirubin: typing.Any = ""
    neurotoxicity_risk: bool = False
    patient_ID: str = ""


@dataclass
class Assessment:
    """Everything derived from one AssessmentInput."""

    hours_of_life: typing.Optional[float]
    gestation: typing.Optional[GestationalAge]
    risk_category: RiskCategory
    bilirubin: typing.Optional[float]
    phototherapy_threshold: typing.Optional[float]
    exchange_threshold: typing.Optional[float]
    percentiles: typing.Optional[Percentiles]
    bhutani_zone: BhutaniZone
    calibration: str = DEFAULT_CALIBRATION.name
    patient_ID: str = ""

    @property
    def risk_tag(self) -> RiskTag:
        return self.risk_category.tag

    def to_dict(self) -> dict:
        return {
            "patient_ID": self.patient_ID,
            "calibration": self.calibration,
            "hours_of_life": self.hours_of_life,
            "gestation_weeks": None if self.gestation is None else self.gestation.weeks,
            "gestation_days": None if self.gestation is None else self.gestation.days,
            "risk_tag": self.risk_tag.value,
            "risk_label": self.risk_category.label,
            "bilirubin": self.bilirubin,
            "phototherapy_threshold": self.phototherapy_threshold,
            "exchange_threshold": self.exchange_threshold,
            "percentiles": None if self.percentiles is None else self.percentiles._asdict(),
            "bhutani_zone": self.bhutani_zone.label,
        }


def evaluate(inputs: AssessmentInput, calibration: Calibration = DEFAULT_CALIBRATION) -> Assessment:
    """
    Run the full calculation:
      1) hours of life from the two timestamps
      2) risk category from gestation + neurotoxicity flag
      3) phototherapy and exchange-transfusion thresholds
      4) Bhutani percentiles and zone
    Never raises on partial or malformed input; absent values propagate as None.
    """
    hol = compute_hours_of_life(
        inputs.birth_date, inputs.birth_time, inputs.assessment_date, inputs.assessment_time
    )
    gestation = GestationalAge.from_inputs(inputs.gestation_weeks, inputs.gestation_days)
    risk_category = classify_gestational_age(gestation, bool(inputs.neurotoxicity_risk))
    bilirubin = parse_bilirubin(inputs.bilirubin)

    photo = get_limit(calibration.phototherapy, risk_category.tag, hol)
    dvet = get_limit(calibration.exchange_transfusion, risk_category.tag, hol)

    percentiles = None
    if hol is not None and hol >= calibration.bhutani_early_cutoff:
        percentiles = bhutani_percentiles(hol, calibration.bhutani)
    zone = classify_bhutani_zone(
        hol, bilirubin, calibration.bhutani, calibration.bhutani_early_cutoff
    )

    LOGGER.debug(
        f"Evaluated {inputs.patient_ID or 'assessment'}: HOL={hol} risk={risk_category.tag.value} "
        f"photo={photo} dvet={dvet} zone={zone.label!r} ({calibration.name})"
    )
    return Assessment(
        hours_of_life=hol,
        gestation=gestation,
        risk_category=risk_category,
        bilirubin=bilirubin,
        phototherapy_threshold=photo,
        exchange_threshold=dvet,
        percentiles=percentiles,
        bhutani_zone=zone,
        calibration=calibration.name,
        patient_ID=inputs.patient_ID,
    )


def audit_inputs(
    inputs: AssessmentInput,
    assessment: Assessment,
    notepad: Notepad,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> None:
    """
    Record data-quality issues for one assessment.
    Malformed timestamps are errors; everything else the engine tolerates is a warning.
    """
    prefix = f"Patient {inputs.patient_ID!r}: " if inputs.patient_ID else ""

    birth = parse_timestamp(inputs.birth_date, inputs.birth_time)
    now = parse_timestamp(inputs.assessment_date, inputs.assessment_time)
    if inputs.birth_date and inputs.birth_time and birth is None:
        notepad.add_error(
            f"{prefix}cannot parse birth timestamp {inputs.birth_date!r} {inputs.birth_time!r}"
        )
    if inputs.assessment_date and inputs.assessment_time and now is None:
        notepad.add_error(
            f"{prefix}cannot parse assessment timestamp "
            f"{inputs.assessment_date!r} {inputs.assessment_time!r}"
        )
    if birth is not None and now is not None and hours_between(birth, now) < 0:
        notepad.add_warning(f"{prefix}assessment precedes birth; hours of life clamped to 0")

    gestation = assessment.gestation
    if gestation is not None and not 0 <= gestation.days <= 6:
        notepad.add_warning(f"{prefix}gestation days {gestation.days} outside 0-6")
    if assessment.risk_category is RiskCategory.CONSULT_NICU:
        notepad.add_warning(f"{prefix}gestation below 35 weeks; high-risk curves shown, consult NICU")

    hol = assessment.hours_of_life
    if hol is not None and hol < calibration.phototherapy[0].hours:
        notepad.add_warning(
            f"{prefix}{hol} hours of life is before the first chart breakpoint "
            f"({calibration.phototherapy[0].hours:g} h); no thresholds"
        )

    if not is_blank(inputs.bilirubin) and assessment.bilirubin is None:
        notepad.add_warning(f"{prefix}cannot use bilirubin reading {inputs.bilirubin!r}")
