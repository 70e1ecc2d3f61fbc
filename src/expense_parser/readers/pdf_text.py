import pdfplumber

from expense_parser.readers.base import DocumentReader
from expense_parser.logging_setup import get_logger

logger = get_logger("expense_parser.readers.pdf_text")


class PdfTextReader(DocumentReader):
    """
    Reads the text layer of a PDF statement or bill.

    Pages are joined with newlines. Pages without a text layer (scans)
    are skipped with a warning.

    Example:
        reader = PdfTextReader()
        text = reader.read_text('statement.pdf')
    """

    SUFFIXES = (".pdf",)

    def read_text(self, filepath: str) -> str:
        self.validate_file(filepath)

        pages = []
        try:
            with pdfplumber.open(filepath) as pdf:
                if not pdf.pages:
                    raise ValueError("PDF has no pages")

                for page_num, page in enumerate(pdf.pages):
                    text = page.extract_text()

                    if not text:
                        logger.warning("No text extracted from page %d", page_num + 1)
                        continue

                    pages.append(text)

        except Exception as e:
            if isinstance(e, (FileNotFoundError, ValueError)):
                raise
            raise ValueError(f"Error reading PDF: {e}")

        if not pages:
            raise ValueError("Could not extract text from PDF")

        logger.debug("Read %d pages from %s", len(pages), filepath)
        return "\n".join(pages)
