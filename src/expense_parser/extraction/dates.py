"""
Date extraction from free-form financial text.

Patterns are tried in list order; within a pattern every match is tried
in text order. A match is parsed with its 2-digit-year format first and
the 4-digit-year format second.
"""
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence

from expense_parser.logging_setup import get_logger

logger = get_logger("expense_parser.extraction.dates")

# Dates older than this are treated as misreads
MIN_YEAR = 1970

_MONTHS_LONG = (
    r"(?:January|February|March|April|May|June|July|August|September"
    r"|October|November|December)"
)
_MONTHS_SHORT = r"(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)"


@dataclass(frozen=True)
class DatePattern:
    """
    A date shape and the strptime formats used to read it.

    Attributes:
        name: Short label
        regex: Compiled pattern; group 1 is the date text
        fmt: strptime format. A format containing ``%y`` is also retried
            with ``%Y``.
    """
    name: str
    regex: re.Pattern
    fmt: str


def _date_pattern(name: str, regex: str, fmt: str) -> DatePattern:
    return DatePattern(name, re.compile(regex, re.IGNORECASE), fmt)


DATE_PATTERNS: List[DatePattern] = [
    _date_pattern("dd/mm/yy", r"\b(\d{1,2}/\d{1,2}/\d{2,4})\b", "%d/%m/%y"),
    _date_pattern("dd-mm-yy", r"\b(\d{1,2}-\d{1,2}-\d{2,4})\b", "%d-%m-%y"),
    _date_pattern("dd.mm.yy", r"\b(\d{1,2}\.\d{1,2}\.\d{2,4})\b", "%d.%m.%y"),
    _date_pattern("dd-mon-yy", r"\b(\d{1,2}-[A-Za-z]{3}-\d{2,4})\b", "%d-%b-%y"),
    _date_pattern("dd mon yy", r"\b(\d{1,2}\s+[A-Za-z]{3}\s+\d{2,4})\b", "%d %b %y"),
    _date_pattern("mon dd, yyyy", r"\b([A-Za-z]{3}\s+\d{1,2},?\s+\d{4})\b", "%b %d %Y"),
    _date_pattern("iso", r"\b(\d{4}-\d{2}-\d{2})\b", "%Y-%m-%d"),
    # Bills and payment screenshots
    _date_pattern("dd month yyyy", rf"\b(\d{{1,2}}\s+{_MONTHS_LONG},?\s+\d{{4}})\b", "%d %B %Y"),
    _date_pattern("month dd, yyyy", rf"\b({_MONTHS_LONG}\s+\d{{1,2}},?\s+\d{{4}})\b", "%B %d %Y"),
    _date_pattern("dd mon, yyyy", rf"\b(\d{{1,2}}\s+{_MONTHS_SHORT},?\s+\d{{4}})\b", "%d %b %Y"),
    _date_pattern("dd/mm/yyyy hh:mm", r"\b(\d{1,2}/\d{1,2}/\d{4})\s*,?\s*\d{1,2}:\d{2}", "%d/%m/%Y"),
    _date_pattern("dd-mm-yyyy hh:mm", r"\b(\d{1,2}-\d{1,2}-\d{4})\s+\d{1,2}:\d{2}", "%d-%m-%Y"),
]

# Shapes found at the start of bank statement rows
STATEMENT_DATE_PATTERNS: List[DatePattern] = [
    p for p in DATE_PATTERNS if p.name in ("dd/mm/yy", "dd-mm-yy", "dd-mon-yy", "dd mon yy")
]


def _normalize(value: str) -> str:
    return " ".join(value.replace(",", " ").split())


class DateExtractor:
    """
    Best-effort calendar date from text.

    Usage:
        extractor = DateExtractor()
        extractor.extract("Rs 250 debited on 15/01/26")   # date(2026, 1, 15)

        # Pin "today" in tests
        extractor = DateExtractor(today=date(2026, 3, 1))
    """

    def __init__(self, today: Optional[date] = None):
        self._today = today

    @property
    def today(self) -> date:
        return self._today or date.today()

    def extract(self, text: str, patterns: Optional[Sequence[DatePattern]] = None) -> Optional[date]:
        """
        First valid, in-range date in the text.

        Args:
            text: Text to scan
            patterns: Ordered patterns to use, DATE_PATTERNS by default

        Returns:
            The date, or None (caller substitutes today)
        """
        if not text:
            return None

        for pattern in patterns or DATE_PATTERNS:
            for match in pattern.regex.finditer(text):
                parsed = self.parse(match.group(1), pattern.fmt)
                if parsed is not None:
                    return parsed

        return None

    def parse(self, value: str, fmt: str) -> Optional[date]:
        """
        Parse one date string.

        The 2-digit-year form of ``fmt`` is tried first, then the 4-digit
        form. A year more than one year ahead of today is read as
        ``2000 + year % 100``. Returns None when nothing valid comes out.
        """
        value = _normalize(value)
        fmt = _normalize(fmt)

        for candidate in self._formats(fmt):
            try:
                parsed = datetime.strptime(value, candidate).date()
            except ValueError:
                continue

            corrected = self._correct_year(parsed)
            if corrected is not None and self._in_range(corrected):
                return corrected

        logger.debug("Could not read %r as a date", value)
        return None

    @staticmethod
    def _formats(fmt: str) -> Iterable[str]:
        yield fmt
        if "%y" in fmt:
            yield fmt.replace("%y", "%Y")

    def _correct_year(self, parsed: date) -> Optional[date]:
        if parsed.year <= self.today.year + 1:
            return parsed
        try:
            return parsed.replace(year=2000 + parsed.year % 100)
        except ValueError:
            # 29 February landing in a non-leap year
            return None

    def _in_range(self, parsed: date) -> bool:
        return MIN_YEAR <= parsed.year <= self.today.year + 1


def parse_first(value: str, formats: Iterable[str]) -> Optional[date]:
    """Parse with the first matching strptime format, no year correction"""
    value = value.strip()
    for fmt in formats:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None

