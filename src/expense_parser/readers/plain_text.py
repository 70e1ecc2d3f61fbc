from pathlib import Path

from expense_parser.readers.base import DocumentReader


class PlainTextReader(DocumentReader):
    """Reads exported SMS threads and other plain text files"""

    SUFFIXES = (".txt", ".text", ".sms")

    def read_text(self, filepath: str) -> str:
        self.validate_file(filepath)
        return Path(filepath).read_text(encoding="utf-8", errors="replace")
