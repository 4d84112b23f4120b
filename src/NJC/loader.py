import pathlib

import pandas as pd

# Column aliases seen in ward spreadsheets → AssessmentInput fields
RENAME_MAP = {
    "dob": "birth_date",
    "date_of_birth": "birth_date",
    "tob": "birth_time",
    "time_of_birth": "birth_time",
    "current_date": "assessment_date",
    "current_time": "assessment_time",
    "date_of_assessment": "assessment_date",
    "time_of_assessment": "assessment_time",
    "weeks": "gestation_weeks",
    "aog_weeks": "gestation_weeks",
    "days": "gestation_days",
    "aog_days": "gestation_days",
    "tcb": "bilirubin",
    "tsb": "bilirubin",
    "tcb/tsb": "bilirubin",
    "risk_factors": "neurotoxicity_risk",
    "neurotoxicity_risk_factors": "neurotoxicity_risk",
}


def _normalize_headers(df: pd.DataFrame) -> pd.DataFrame:
    # CLEAN & NORMALIZE headers:
    df.columns = (
        df.columns.astype(str)
        .str.strip()
        .str.replace(r"\s*\(.*?\)", "", regex=True)  # drop any "(…)", e.g. units
        .str.replace(r"\s+", "_", regex=True)  # spaces → underscore
        .str.replace(":", "", regex=False)  # drop colons
        .str.lower()
    )
    # apply specific renames (e.g. "dob" → "birth_date")
    df = df.rename(
        columns={
            orig: target
            for orig, target in RENAME_MAP.items()
            if orig in df.columns
        }
    )
    return _merge_duplicate_columns(df)


def _merge_duplicate_columns(df: pd.DataFrame) -> pd.DataFrame:
    """
    Several aliases can land on one field (e.g. both "TcB" and "TSB" → "bilirubin").
    Collapse them into a single column holding the first non-empty value per row,
    in sheet order.
    """
    if not df.columns.has_duplicates:
        return df
    merged = {}
    for name in dict.fromkeys(df.columns):
        block = df.loc[:, df.columns == name]
        if block.shape[1] == 1:
            merged[name] = block.iloc[:, 0]
        else:
            block = block.astype(object).replace(r"^\s*$", pd.NA, regex=True)
            merged[name] = block.bfill(axis=1).iloc[:, 0]
    return pd.DataFrame(merged, index=df.index)


def load_assessment_tables(table_path: str) -> dict[str, pd.DataFrame]:
    """
    Read assessment rows into DataFrames keyed by sheet name:
      - .csv → one table named after the file stem
      - anything else is read as an Excel workbook, one table per worksheet
      - first row = header, first column = index (patient ID)
      - headers normalized to snake_case lowercase, then RENAME_MAP applied
    """
    path = pathlib.Path(table_path)
    tables: dict[str, pd.DataFrame] = {}

    if path.suffix.lower() == ".csv":
        # keep cells as text so "07:05" and "" survive untouched
        df = pd.read_csv(path, header=0, index_col=0, dtype=str, keep_default_na=False)
        tables[path.stem] = _normalize_headers(df)
        return tables

    excel = pd.ExcelFile(path, engine="openpyxl")
    for sheet_name in excel.sheet_names:
        df = pd.read_excel(
            excel, sheet_name=sheet_name, header=0, index_col=0, engine="openpyxl"
        )
        tables[sheet_name] = _normalize_headers(df)

    return tables
