"""
Plain-text handover report for one assessment.

Field order is fixed; downstream notes paste the block verbatim.
"""

import math
import typing

from .assessment import Assessment, AssessmentInput
from .gestation import parse_int

INCOMPLETE_DATA = "Incomplete Data"
NOT_AVAILABLE = "N/A"


def compare_to_threshold(reading: typing.Optional[float], threshold: typing.Optional[float]) -> str:
    """ABOVE if reading >= threshold, BELOW otherwise, N/A when either is missing."""
    if reading is None or threshold is None:
        return NOT_AVAILABLE
    return "ABOVE" if reading >= threshold else "BELOW"


def format_reading(value: float) -> str:
    # shortest form: 10.0 -> "10", 7.5 -> "7.5"
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _threshold_line(reading: typing.Optional[float], threshold: typing.Optional[float]) -> str:
    status = compare_to_threshold(reading, threshold)
    if threshold is None:
        return status
    return f"{status} ({threshold:.1f})"


def assemble_report(inputs: AssessmentInput, assessment: Assessment) -> str:
    """
    Render the report block, or "Incomplete Data" when the timestamps,
    the gestation weeks or the hours of life are missing.
    """
    weeks = parse_int(inputs.gestation_weeks)
    if (
        not inputs.birth_date
        or not inputs.birth_time
        or not inputs.assessment_date
        or not inputs.assessment_time
        or weeks is None
        or assessment.hours_of_life is None
    ):
        return INCOMPLETE_DATA

    days = parse_int(inputs.gestation_days)
    reading = assessment.bilirubin
    tcb = f"{format_reading(reading)} mg/dL" if reading is not None else NOT_AVAILABLE

    lines = [
        f"DOB: {inputs.birth_date.replace('-', '/')}",
        f"TOB: {inputs.birth_time}",
        f"AOG: {weeks} weeks {days if days is not None else 0} days",
        f"HOL: {math.floor(assessment.hours_of_life)}",
        assessment.risk_category.label,
        "",
        f"TCB: {tcb}",
        f"PHOTOLEVEL: {_threshold_line(reading, assessment.phototherapy_threshold)}",
        f"DVET level: {_threshold_line(reading, assessment.exchange_threshold)}",
        f"Bhutani Risk Zone: {assessment.bhutani_zone.label}",
    ]
    return "\n".join(lines)
