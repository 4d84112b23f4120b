import json
import re

import pandas as pd
from click.testing import CliRunner

from NJC.__main__ import main


def test_assess_table_summary(assessment_workbook):
    runner = CliRunner()
    result = runner.invoke(main, ["assess-table", "-e", assessment_workbook])
    assert result.exit_code == 0, result.output

    lines = result.output.splitlines()
    assert lines[0].startswith("PATIENT")
    for line in lines[1:4]:
        parts = re.split(r"\s{2,}", line.strip())
        assert len(parts) == 7, f"Bad line in summary table: {line}"

    p1 = re.split(r"\s{2,}", lines[1].strip())
    assert p1 == ["P1", "48.0", "LOW", "10", "BELOW 15.0", "BELOW 22.0", "Low Intermediate Risk Zone"]
    p2 = re.split(r"\s{2,}", lines[2].strip())
    assert p2 == ["P2", "24.0", "HIGH", "12.5", "ABOVE 8.0", "BELOW 15.0", "High Risk Zone"]
    p3 = re.split(r"\s{2,}", lines[3].strip())
    assert p3 == ["P3", "6.0", "LOW", "-", "N/A", "N/A", "N/A (Too Early)"]

    assert "Evaluated 3 assessments" in result.output
    # P3 is assessed before the chart starts
    assert "Warnings found in input" in result.output
    assert "Patient 'P3'" in result.output


def test_assess_table_json(assessment_csv):
    runner = CliRunner()
    result = runner.invoke(main, ["assess-table", "-e", assessment_csv, "-r"])
    assert result.exit_code == 0, result.output

    payload = json.loads(result.output)
    assert [a["patient_ID"] for a in payload["assessments"]] == ["P1", "P2", "P3"]
    for obj in payload["assessments"]:
        assert {"hours_of_life", "risk_tag", "bhutani_zone", "report"}.issubset(obj)
    assert payload["assessments"][2]["report"].startswith("DOB: 2024/01/01")
    assert payload["errors"] == []


def test_assess_table_without_usable_sheet_fails(tmp_path):
    path = tmp_path / "notes.csv"
    pd.DataFrame({"comment": ["x"]}, index=["P1"]).to_csv(path)
    runner = CliRunner()
    result = runner.invoke(main, ["assess-table", "-e", str(path)])
    assert result.exit_code == 1
    assert "Errors found in input" in result.output


def test_assess_table_unreadable_file(tmp_path):
    path = tmp_path / "broken.xlsx"
    path.write_text("not a workbook")
    runner = CliRunner()
    result = runner.invoke(main, ["assess-table", "-e", str(path)])
    assert result.exit_code == 1
