from abc import ABC, abstractmethod
from pathlib import Path
from typing import Tuple


class DocumentReader(ABC):
    """
    Abstract base class for all document readers.

    A reader turns one kind of file into plain text. Finding transactions
    in that text is left to the extraction engine, so a reader knows
    nothing about banks or statement layouts.
    """

    # File suffixes this reader accepts, lower-case with the leading dot
    SUFFIXES: Tuple[str, ...] = ()

    @abstractmethod
    def read_text(self, filepath: str) -> str:
        """
        Read a document and return its text.

        Args:
            filepath: Path to the document

        Returns:
            Document text, lines separated by newlines

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If file format is invalid
        """
        pass

    def validate_file(self, filepath: str) -> None:
        """
        Validate that the file exists and has a supported suffix.

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If the suffix is not one of SUFFIXES
        """
        path = Path(filepath)

        if not path.exists():
            raise FileNotFoundError(f"File not found: {filepath}")

        if self.SUFFIXES and path.suffix.lower() not in self.SUFFIXES:
            expected = ", ".join(self.SUFFIXES)
            raise ValueError(f"File must be one of {expected}, got: {path.suffix}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
