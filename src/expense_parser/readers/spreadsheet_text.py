import re
from datetime import date, datetime
from numbers import Real
from pathlib import Path
from typing import Any

import pandas as pd

from expense_parser.readers.base import DocumentReader
from expense_parser.logging_setup import get_logger

logger = get_logger("expense_parser.readers.spreadsheet_text")

# Whole numbers at least this long are account/reference numbers, not amounts
REFERENCE_NUMBER_MIN = 10 ** 9

# Numeric text a CSV export leaves without two decimals: 499 / 1,299 / 12.5
SHORT_NUMBER = re.compile(r"^\d[\d,]*(?:\.\d)?$")


class SpreadsheetTextReader(DocumentReader):
    """
    Flattens an Excel or CSV statement export into text, one row per line.

    Cells are joined with spaces. Date cells are written as DD/MM/YYYY and
    numeric cells with two decimals so the statement segmenter sees the
    same shapes it sees in PDF statements. Numbers that look like account
    or reference numbers are left whole.

    Example:
        reader = SpreadsheetTextReader()
        text = reader.read_text('statement.xlsx')
    """

    SUFFIXES = (".xlsx", ".xls", ".csv")

    def read_text(self, filepath: str) -> str:
        self.validate_file(filepath)

        try:
            df = self._read_frame(filepath)
        except Exception as e:
            raise ValueError(f"Error reading spreadsheet: {e}")

        lines = []
        for _, row in df.iterrows():
            cells = [self._format_cell(value) for value in row if pd.notna(value)]
            line = " ".join(cell for cell in cells if cell)
            if line:
                lines.append(line)

        if not lines:
            logger.warning("Spreadsheet %s has no rows", filepath)

        return "\n".join(lines)

    @staticmethod
    def _read_frame(filepath: str) -> pd.DataFrame:
        if Path(filepath).suffix.lower() == ".csv":
            return pd.read_csv(filepath, header=None, dtype=str, keep_default_na=False)
        return pd.read_excel(filepath, header=None)

    @staticmethod
    def _format_cell(value: Any) -> str:
        if isinstance(value, (pd.Timestamp, datetime, date)):
            return value.strftime("%d/%m/%Y")

        # numpy int64/float64 from read_excel are Reals too
        if isinstance(value, Real) and not isinstance(value, bool):
            return SpreadsheetTextReader._format_number(float(value))

        text = str(value).strip()
        if SHORT_NUMBER.match(text):
            return SpreadsheetTextReader._format_number(float(text.replace(",", "")), text)
        return text

    @staticmethod
    def _format_number(number: float, original: str = "") -> str:
        if number.is_integer() and abs(number) >= REFERENCE_NUMBER_MIN:
            return original or str(int(number))
        return f"{number:.2f}"
