import pandas as pd
import pytest

from NJC.assessment import AssessmentInput


@pytest.fixture
def low_risk_inputs() -> AssessmentInput:
    """
    Term neonate, no risk factors, assessed at exactly 48 hours of life.
    """
    return AssessmentInput(
        birth_date="2024-01-01",
        birth_time="00:00",
        assessment_date="2024-01-03",
        assessment_time="00:00",
        gestation_weeks="39",
        gestation_days="0",
        bilirubin="10",
        neurotoxicity_risk=False,
    )


@pytest.fixture
def assessment_frame() -> pd.DataFrame:
    """
    Three patients with ward-style headers:
      P1 - 48 h, 39w0d, no risk factors, TcB 10
      P2 - 24 h, 36w3d, risk factors, TcB 12.5
      P3 - 6 h, 40w, no reading (before the chart)
    """
    df = pd.DataFrame(
        {
            "DOB": ["2024-01-01", "2024-01-01", "2024-01-01"],
            "TOB": ["00:00", "08:00", "00:00"],
            "Current Date": ["2024-01-03", "2024-01-02", "2024-01-01"],
            "Current Time": ["00:00", "08:00", "06:00"],
            "AOG Weeks": [39, 36, 40],
            "AOG Days": [0, 3, None],
            "TCB (mg/dL)": [10.0, 12.5, None],
            "Risk Factors": [False, True, False],
        },
        index=pd.Index(["P1", "P2", "P3"], name="patient"),
    )
    return df


@pytest.fixture
def assessment_workbook(tmp_path, assessment_frame) -> str:
    path = tmp_path / "assessments.xlsx"
    with pd.ExcelWriter(path, engine="openpyxl") as w:
        assessment_frame.to_excel(w, sheet_name="nursery")
    return str(path)


@pytest.fixture
def assessment_csv(tmp_path, assessment_frame) -> str:
    path = tmp_path / "assessments.csv"
    assessment_frame.to_csv(path)
    return str(path)
