import abc
import typing
from datetime import date, datetime, time

import pandas as pd
from stairval.notepad import Notepad

from .assessment import AssessmentInput
from .timing import DATE_FORMAT, TIME_FORMAT

PATIENT_ID_COLUMN = "patient_ID"

# Minimal required columns (after renaming) for a sheet of assessments
ASSESSMENT_KEY_COLUMNS = {
    "birth_date",
    "birth_time",
    "assessment_date",
    "assessment_time",
    "gestation_weeks",
}


class TableMapper(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def apply_mapping(
            self, tables: dict[str, pd.DataFrame], notepad: Notepad
    ) -> typing.Sequence[AssessmentInput]:
        raise NotImplementedError


class AssessmentMapper(TableMapper):

    def apply_mapping(
            self, tables: dict[str, pd.DataFrame], notepad: Notepad
    ) -> list[AssessmentInput]:
        """
        Map every sheet that carries the assessment columns.
        Sheets without them are skipped with a warning; if none qualify, that is an error.
        """
        records: list[AssessmentInput] = []
        mapped_any = False
        for sheet_name, df in tables.items():
            missing = ASSESSMENT_KEY_COLUMNS - set(df.columns)
            if missing:
                notepad.add_warning(
                    f"Sheet {sheet_name!r}: skipped, missing columns: {sorted(missing)}"
                )
                continue
            mapped_any = True
            records.extend(self.map_table(df, sheet_name, notepad))

        if not mapped_any:
            notepad.add_error(
                f"No sheet has the required assessment columns: {sorted(ASSESSMENT_KEY_COLUMNS)}"
            )
        return records

    def map_table(self, df: pd.DataFrame, sheet_name: str, notepad: Notepad) -> list[AssessmentInput]:
        """
        Sheet-level wrapper:
          - normalize index to 'patient_ID'
          - require ASSESSMENT_KEY_COLUMNS
          - delegate row conversion to parse_assessment_row
        """
        working = self._prepare_sheet(df)
        missing = sorted(ASSESSMENT_KEY_COLUMNS - set(working.columns))
        if missing:
            notepad.add_error(f"Sheet {sheet_name!r}: missing required columns: {missing}")
            return []

        records: list[AssessmentInput] = []
        for _, row in working.iterrows():
            record = self.parse_assessment_row(row, sheet_name, notepad)
            if record is not None:
                records.append(record)
        return records

    @staticmethod
    def _prepare_sheet(df: pd.DataFrame) -> pd.DataFrame:
        """Bring the index into a column and name it 'patient_ID'."""
        working = df.reset_index()
        original = working.columns[0]
        return working.rename(columns={original: PATIENT_ID_COLUMN})

    @staticmethod
    def parse_assessment_row(row: pd.Series, sheet_name: str, notepad: Notepad) -> AssessmentInput | None:
        """
        Parse a single row into an AssessmentInput.
        Returns None (with a warning) when the row has no patient ID.
        An unrecognised risk-factor cell is read as False, with a warning.
        """
        patient_id = AssessmentMapper._normalize_number_text(row.get(PATIENT_ID_COLUMN))
        if not patient_id:
            notepad.add_warning(f"Sheet {sheet_name!r}: row without patient ID skipped")
            return None

        raw_flag = row.get("neurotoxicity_risk")
        neurotoxicity_risk = AssessmentMapper._to_bool(raw_flag)
        if neurotoxicity_risk is None:
            notepad.add_warning(
                f"Patient {patient_id!r}: unrecognised neurotoxicity risk value {raw_flag!r}, "
                "treated as no risk factors"
            )
            neurotoxicity_risk = False

        return AssessmentInput(
            patient_ID=patient_id,
            birth_date=AssessmentMapper._normalize_date(row.get("birth_date")),
            birth_time=AssessmentMapper._normalize_time(row.get("birth_time")),
            assessment_date=AssessmentMapper._normalize_date(row.get("assessment_date")),
            assessment_time=AssessmentMapper._normalize_time(row.get("assessment_time")),
            gestation_weeks=AssessmentMapper._normalize_number_text(row.get("gestation_weeks")),
            gestation_days=AssessmentMapper._normalize_number_text(row.get("gestation_days")),
            bilirubin=AssessmentMapper._normalize_number_text(row.get("bilirubin")),
            neurotoxicity_risk=neurotoxicity_risk,
        )

    @staticmethod
    def _is_missing(value: typing.Any) -> bool:
        # None, NaN, NaT, pandas NA, and empty/whitespace-only strings
        if value is None:
            return True
        if isinstance(value, str):
            return not value.strip()
        try:
            return bool(pd.isna(value))
        except (TypeError, ValueError):
            return False

    @staticmethod
    def _normalize_date(value: typing.Any) -> str:
        """
        Dates:
        - Excel date/datetime cells -> 'YYYY-MM-DD'
        - strings are trimmed and passed through
        - empty/NaN -> ''
        """
        if AssessmentMapper._is_missing(value):
            return ""
        if isinstance(value, (datetime, date)):
            return value.strftime(DATE_FORMAT)
        return str(value).strip()

    @staticmethod
    def _normalize_time(value: typing.Any) -> str:
        """
        Times of day:
        - Excel time/datetime cells -> 'HH:MM'
        - a fraction of a day (Excel serial time, e.g. 0.5) -> 'HH:MM'
        - strings are trimmed and passed through
        - empty/NaN -> ''
        """
        if AssessmentMapper._is_missing(value):
            return ""
        if isinstance(value, (datetime, time)):
            return value.strftime(TIME_FORMAT)
        if isinstance(value, float) and 0 <= value < 1:
            minutes = round(value * 24 * 60)
            return f"{minutes // 60:02d}:{minutes % 60:02d}"
        return str(value).strip()

    @staticmethod
    def _normalize_number_text(value: typing.Any) -> str:
        """
        Numeric cells as the text a form field would hold:
        - 39.0 -> '39', 7.5 -> '7.5'
        - strings are trimmed
        - empty/NaN -> ''
        """
        if AssessmentMapper._is_missing(value):
            return ""
        if isinstance(value, float):
            return str(int(value)) if value.is_integer() else repr(float(value))
        return str(value).strip()

    @staticmethod
    def _to_bool(value: typing.Any) -> typing.Optional[bool]:
        """
        Robust boolean parsing:
        - True for: 1, '1', 'true', 't', 'yes', 'y' (case-insensitive)
        - False for: 0, '0', 'false', 'f', 'no', 'n', '', None, NaN
        - None for anything else, so the caller can flag it
        """
        if isinstance(value, bool):
            return value
        if AssessmentMapper._is_missing(value):
            return False
        s = str(value).strip().lower()
        if s in {"1", "1.0", "true", "t", "yes", "y"}:
            return True
        if s in {"0", "0.0", "false", "f", "no", "n"}:
            return False
        return None
