import pytest
from datetime import datetime
from pathlib import Path

import pandas as pd

from expense_parser.readers.pdf_text import PdfTextReader
from expense_parser.readers.plain_text import PlainTextReader
from expense_parser.readers.spreadsheet_text import SpreadsheetTextReader
from expense_parser.extraction.segmenter import StatementSegmenter

@pytest.fixture
def sample_csv_file(tmp_path) -> Path:
    path = tmp_path / "statement.csv"
    path.write_text(
        "Date,Narration,Amount,Type\n"
        "05/01/25,UPI/SWIGGY/ORDER,499.00,DR\n"
        "08/01/25,SALARY,\"50,000.00\",CR\n",
        encoding="utf-8",
    )
    return path

@pytest.fixture
def sample_xlsx_file(tmp_path) -> Path:
    path = tmp_path / "statement.xlsx"
    df = pd.DataFrame([
        [datetime(2025, 1, 5), "UPI/SWIGGY/ORDER", 499.0, "DR"],
        [datetime(2025, 1, 7), "POS AMAZON RETAIL", 1299.5, "DR"],
    ])
    df.to_excel(path, header=False, index=False)
    return path

@pytest.fixture
def pdf_file(tmp_path) -> Path:
    path = tmp_path / "statement.pdf"
    path.write_bytes(b"%PDF-1.4 placeholder")
    return path

@pytest.fixture
def mock_pdf(mocker):
    """Patch pdfplumber.open and return the fake document it yields"""
    pdf = mocker.MagicMock()
    mock_open = mocker.patch("expense_parser.readers.pdf_text.pdfplumber.open")
    mock_open.return_value.__enter__.return_value = pdf
    return pdf

def _page(mocker, text):
    page = mocker.Mock()
    page.extract_text.return_value = text
    return page

@pytest.mark.integration
class TestPlainTextReader:

    def test_read_text(self, tmp_path):
        path = tmp_path / "sms.txt"
        path.write_text("Rs 250 debited for SWIGGY", encoding="utf-8")

        assert PlainTextReader().read_text(str(path)) == "Rs 250 debited for SWIGGY"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            PlainTextReader().read_text(str(tmp_path / "missing.txt"))

@pytest.mark.integration
class TestSpreadsheetTextReader:
    """End-to-end tests with real spreadsheet files"""

    def test_csv_rows_become_lines(self, sample_csv_file: Path):
        # Act
        text = SpreadsheetTextReader().read_text(str(sample_csv_file))

        # Assert
        assert text.splitlines() == [
            "Date Narration Amount Type",
            "05/01/25 UPI/SWIGGY/ORDER 499.00 DR",
            "08/01/25 SALARY 50,000.00 CR",
        ]

    def test_xlsx_dates_and_amounts_are_formatted(self, sample_xlsx_file: Path):
        text = SpreadsheetTextReader().read_text(str(sample_xlsx_file))

        assert text.splitlines() == [
            "05/01/2025 UPI/SWIGGY/ORDER 499.00 DR",
            "07/01/2025 POS AMAZON RETAIL 1299.50 DR",
        ]

    def test_segmenter_reads_flattened_xlsx(self, sample_xlsx_file: Path, snapshot, today):
        # Arrange
        text = SpreadsheetTextReader().read_text(str(sample_xlsx_file))

        # Act
        transactions = StatementSegmenter(snapshot, today=today).parse(text)

        # Assert
        assert [str(t.amount) for t in transactions] == ["499.00", "1299.50"]

    def test_whole_number_amounts_get_two_decimals(self, tmp_path, snapshot, today):
        # Arrange
        path = tmp_path / "whole.csv"
        path.write_text(
            "05/01/2025,UPI SWIGGY,499,DR\n"
            "06/01/2025,POS AMAZON,\"1,299\",DR\n",
            encoding="utf-8",
        )

        # Act
        text = SpreadsheetTextReader().read_text(str(path))
        transactions = StatementSegmenter(snapshot, today=today).parse(text)

        # Assert
        assert text.splitlines() == [
            "05/01/2025 UPI SWIGGY 499.00 DR",
            "06/01/2025 POS AMAZON 1299.00 DR",
        ]
        assert [str(t.amount) for t in transactions] == ["499.00", "1299.00"]

    def test_xlsx_integer_column(self, tmp_path):
        path = tmp_path / "ints.xlsx"
        pd.DataFrame([[datetime(2025, 1, 5), "UPI SWIGGY", 499, "DR"]]).to_excel(
            path, header=False, index=False
        )

        text = SpreadsheetTextReader().read_text(str(path))

        assert text == "05/01/2025 UPI SWIGGY 499.00 DR"

    def test_reference_numbers_stay_whole(self):
        assert SpreadsheetTextReader._format_cell(12345678901.0) == "12345678901"
        assert SpreadsheetTextReader._format_cell("9876543210") == "9876543210"
        assert SpreadsheetTextReader._format_cell(42.0) == "42.00"
        assert SpreadsheetTextReader._format_cell("12.5") == "12.50"

    def test_wrong_suffix(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")

        with pytest.raises(ValueError):
            SpreadsheetTextReader().read_text(str(path))

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "broken.xlsx"
        path.write_bytes(b"not a spreadsheet")

        with pytest.raises(ValueError, match="Error reading spreadsheet"):
            SpreadsheetTextReader().read_text(str(path))

@pytest.mark.integration
class TestPdfTextReader:

    def test_pages_are_joined_and_blank_pages_skipped(self, mocker, mock_pdf, pdf_file: Path):
        # Arrange
        mock_pdf.pages = [
            _page(mocker, "05/01/25 UPI/SWIGGY/ORDER 499.00 DR"),
            _page(mocker, None),
            _page(mocker, "07/01/25 POS AMAZON 1,299.00 DR"),
        ]

        # Act
        text = PdfTextReader().read_text(str(pdf_file))

        # Assert
        assert text == "05/01/25 UPI/SWIGGY/ORDER 499.00 DR\n07/01/25 POS AMAZON 1,299.00 DR"

    def test_no_text_layer(self, mocker, mock_pdf, pdf_file: Path):
        mock_pdf.pages = [_page(mocker, ""), _page(mocker, None)]

        with pytest.raises(ValueError, match="Could not extract text"):
            PdfTextReader().read_text(str(pdf_file))

    def test_no_pages(self, mock_pdf, pdf_file: Path):
        mock_pdf.pages = []

        with pytest.raises(ValueError, match="no pages"):
            PdfTextReader().read_text(str(pdf_file))

    def test_pdfplumber_error_is_wrapped(self, mocker, pdf_file: Path):
        mocker.patch(
            "expense_parser.readers.pdf_text.pdfplumber.open",
            side_effect=RuntimeError("broken xref"),
        )

        with pytest.raises(ValueError, match="Error reading PDF"):
            PdfTextReader().read_text(str(pdf_file))

    def test_wrong_suffix(self, tmp_path):
        path = tmp_path / "statement.csv"
        path.write_text("a,b")

        with pytest.raises(ValueError):
            PdfTextReader().read_text(str(path))
