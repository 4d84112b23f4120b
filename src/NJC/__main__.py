"""
Command-line interface for the NJC toolkit.

Evaluates neonatal jaundice assessments against the AAP 2004 treatment
curves and the Bhutani nomogram, either for one neonate from options or for
every row of a workbook/CSV.
"""

import json
import logging
import sys
import typing

import click
import pandas as pd
from stairval.notepad import Notepad, create_notepad

from .assessment import Assessment, AssessmentInput, audit_inputs, evaluate
from .calibration import CALIBRATION_ENV_VAR, CALIBRATIONS, DEFAULT_CALIBRATION, Calibration, get_calibration
from .curves import bhutani_percentiles, get_limit
from .loader import load_assessment_tables
from .mapper import AssessmentMapper
from .report import assemble_report, compare_to_threshold, format_reading
from .risk import RiskTag
from .timing import current_date_and_time

LOGGER = logging.getLogger(__name__)

calibration_option = click.option(
    "-c",
    "--calibration",
    "calibration_name",
    type=click.Choice(sorted(CALIBRATIONS), case_sensitive=False),
    default=DEFAULT_CALIBRATION.name,
    envvar=CALIBRATION_ENV_VAR,
    show_default=True,
    help=f"curve set to evaluate against (env: {CALIBRATION_ENV_VAR})",
)


@click.group()
@click.option("--verbose-logging", is_flag=True, help="Also emit debug logs to stderr")
@click.option(
    "--log-file-path",
    type=click.Path(dir_okay=False, writable=True),
    help="Append timestamped logs to this file",
)
def main(verbose_logging: bool, log_file_path: typing.Optional[str]):
    """NJC: Neonatal Jaundice Calculator (AAP 2004 thresholds, Bhutani zones)."""
    _configure_logging(verbose_logging, log_file_path)


@main.command(name="assess")
@click.option("-b", "--birth-date", default="", help="birth date, YYYY-MM-DD")
@click.option("-t", "--birth-time", default="", help="birth time, HH:MM (24h)")
@click.option("--assessment-date", default=None, help="assessment date, YYYY-MM-DD (default: today)")
@click.option("--assessment-time", default=None, help="assessment time, HH:MM (default: now)")
@click.option("-w", "--weeks", "gestation_weeks", default="", help="completed weeks of gestation")
@click.option("-d", "--days", "gestation_days", default="", help="extra days of gestation (0-6)")
@click.option("-B", "--bilirubin", default="", help="TcB/TSB reading in mg/dL")
@click.option(
    "--neurotoxicity-risk/--no-neurotoxicity-risk",
    default=False,
    help="isoimmune disease, G6PD, asphyxia, sepsis, acidosis, albumin < 3.0",
)
@calibration_option
@click.option("-r", "--raw", "as_json", is_flag=True, help="print the assessment as JSON")
def assess(
    birth_date: str,
    birth_time: str,
    assessment_date: typing.Optional[str],
    assessment_time: typing.Optional[str],
    gestation_weeks: str,
    gestation_days: str,
    bilirubin: str,
    neurotoxicity_risk: bool,
    calibration_name: str,
    as_json: bool,
):
    """
    Evaluate one neonate and print the handover report.
    The assessment instant defaults to the local wall clock.
    """
    today, now = current_date_and_time()
    inputs = AssessmentInput(
        birth_date=birth_date,
        birth_time=birth_time,
        assessment_date=today if assessment_date is None else assessment_date,
        assessment_time=now if assessment_time is None else assessment_time,
        gestation_weeks=gestation_weeks,
        gestation_days=gestation_days,
        bilirubin=bilirubin,
        neurotoxicity_risk=neurotoxicity_risk,
    )
    calibration = get_calibration(calibration_name)

    notepad = create_notepad("assessment")
    assessment = evaluate(inputs, calibration)
    audit_inputs(inputs, assessment, notepad, calibration)
    report = assemble_report(inputs, assessment)

    if as_json:
        payload = _assessment_payload(inputs, assessment)
        payload.update(_issues_payload(notepad))
        click.echo(json.dumps(payload, indent=2))
        return

    click.echo(report)
    if notepad.has_errors(include_subsections=True) or notepad.has_warnings(include_subsections=True):
        click.echo("")
        _report_issues(notepad)


@main.command(name="assess-table")
@click.option(
    "-e",
    "--table-path",
    "table_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="path to an Excel workbook or CSV file with one assessment per row",
)
@calibration_option
@click.option("-r", "--raw", "as_json", is_flag=True, help="print JSON instead of a table")
def assess_table(table_path: str, calibration_name: str, as_json: bool):
    """
    Evaluate every row of a workbook (all sheets) or CSV.
    The first column is the patient ID; required columns are birth date/time,
    assessment date/time and gestation weeks.
    """
    calibration = get_calibration(calibration_name)
    LOGGER.info(f"Beginning assessment of '{table_path}' with {calibration.name}")
    try:
        tables = load_assessment_tables(table_path)
    except Exception as e:
        LOGGER.error(f"Failed to read '{table_path}': {e}")
        click.echo(f"Error: cannot read {table_path}: {e}", err=True)
        sys.exit(1)
    LOGGER.debug(f"Loaded sheets: {list(tables.keys())}")

    notepad = create_notepad("assessments")
    inputs_list = AssessmentMapper().apply_mapping(tables, notepad)

    results: list[tuple[AssessmentInput, Assessment]] = []
    for inputs in inputs_list:
        assessment = evaluate(inputs, calibration)
        audit_inputs(inputs, assessment, notepad, calibration)
        results.append((inputs, assessment))

    if as_json:
        payload = {"assessments": [_assessment_payload(i, a) for i, a in results]}
        payload.update(_issues_payload(notepad))
        click.echo(json.dumps(payload, indent=2))
    else:
        for line in _summary_lines(results):
            click.echo(line)
        click.echo(f"Evaluated {len(results)} assessments")
        if notepad.has_errors(include_subsections=True) or notepad.has_warnings(include_subsections=True):
            _report_issues(notepad)

    if not results and notepad.has_errors(include_subsections=True):
        sys.exit(1)


@main.command(name="show-curve")
@calibration_option
@click.option("-s", "--step", default=12, show_default=True, type=click.IntRange(min=1), help="hours between rows")
def show_curve(calibration_name: str, step: int):
    """
    Print the rounded treatment thresholds and Bhutani percentiles per hour,
    from the first breakpoint to one day past the plateau.
    """
    calibration = get_calibration(calibration_name)
    click.echo(f"{calibration.name}: {calibration.description}")
    click.echo(curve_table(calibration, step).to_string(index=False))


def curve_table(calibration: Calibration, step: int = 12) -> pd.DataFrame:
    start = int(calibration.phototherapy[0].hours)
    stop = int(calibration.phototherapy[-1].hours) + 24
    rows = []
    for hol in range(start, stop + 1, step):
        row = {"HOL": hol}
        for tag in (RiskTag.LOW, RiskTag.MED, RiskTag.HIGH):
            row[f"PHOTO_{tag.value}"] = get_limit(calibration.phototherapy, tag, hol)
        for tag in (RiskTag.LOW, RiskTag.MED, RiskTag.HIGH):
            row[f"DVET_{tag.value}"] = get_limit(calibration.exchange_transfusion, tag, hol)
        if hol >= calibration.bhutani_early_cutoff:
            percentiles = bhutani_percentiles(hol, calibration.bhutani)
            row.update({name.upper(): round(value, 1) for name, value in percentiles._asdict().items()})
        rows.append(row)
    return pd.DataFrame(rows)


def _configure_logging(verbose_logging: bool, log_file_path: typing.Optional[str]) -> None:
    handlers: list[logging.Handler] = []
    if log_file_path:
        handlers.append(logging.FileHandler(log_file_path, mode="a", encoding="utf-8"))
    if verbose_logging:
        handlers.append(logging.StreamHandler(sys.stderr))
    if handlers:
        logging.basicConfig(
            level=logging.DEBUG if verbose_logging else logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            handlers=handlers,
            force=True,
        )


def _assessment_payload(inputs: AssessmentInput, assessment: Assessment) -> dict:
    payload = assessment.to_dict()
    payload["phototherapy_status"] = compare_to_threshold(assessment.bilirubin, assessment.phototherapy_threshold)
    payload["exchange_status"] = compare_to_threshold(assessment.bilirubin, assessment.exchange_threshold)
    payload["report"] = assemble_report(inputs, assessment)
    return payload


def _issues_payload(notepad: Notepad) -> dict:
    return {
        "errors": [issue.message for issue in notepad.errors()],
        "warnings": [issue.message for issue in notepad.warnings()],
    }


def _report_issues(notepad: Notepad):
    # if there were errors, show them
    if notepad.has_errors(include_subsections=True):
        click.echo("Errors found in input:")
        for err in notepad.errors():
            click.echo(f"- {err.message}")
    # show any warnings but keep going
    if notepad.has_warnings(include_subsections=True):
        click.echo("Warnings found in input:")
        for w in notepad.warnings():
            click.echo(f"- {w.message}")


def _summary_lines(results: typing.Sequence[tuple[AssessmentInput, Assessment]]) -> list[str]:
    header = ["PATIENT", "HOL", "RISK", "TCB", "PHOTO", "DVET", "ZONE"]
    rows = []
    for inputs, assessment in results:
        hol = assessment.hours_of_life
        reading = assessment.bilirubin
        rows.append([
            inputs.patient_ID,
            "-" if hol is None else f"{hol:.1f}",
            assessment.risk_tag.value,
            "-" if reading is None else format_reading(reading),
            _status_cell(reading, assessment.phototherapy_threshold),
            _status_cell(reading, assessment.exchange_threshold),
            assessment.bhutani_zone.label,
        ])
    widths = [max(len(str(cells[i])) for cells in [header, *rows]) for i in range(len(header))]
    return [
        "  ".join(str(cell).ljust(width) for cell, width in zip(cells, widths)).rstrip()
        for cells in [header, *rows]
    ]


def _status_cell(reading: typing.Optional[float], threshold: typing.Optional[float]) -> str:
    status = compare_to_threshold(reading, threshold)
    return status if threshold is None else f"{status} {threshold:.1f}"


if __name__ == "__main__":
    main()
