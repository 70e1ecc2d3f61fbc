"""
Currency and amount extraction.

Amounts are found by ordered pattern cascades. Each cascade is a plain
list of AmountPattern entries evaluated top to bottom; the first entry
that yields a positive amount anywhere in the text wins, regardless of
where in the text that amount sits.
"""
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Iterable, List, NamedTuple, Optional

from expense_parser.domain.enums import Currency

# Number with optional grouping separators and decimals: 1,250.00 / 1,00,000 / 499
NUMBER = r"(\d[\d,]*(?:\.\d+)?)"
DECIMAL_NUMBER = r"(\d[\d,]*\.\d{2})"


class AmountMatch(NamedTuple):
    amount: Decimal
    currency: Currency


def to_decimal(value: str) -> Optional[Decimal]:
    """
    Convert a matched number to Decimal.

    Grouping separators are stripped. Returns None for anything that is
    not a positive number.
    """
    cleaned = value.replace(",", "").strip().rstrip(".")
    if not cleaned:
        return None

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return None

    if amount <= 0:
        return None
    return amount


@dataclass(frozen=True)
class AmountPattern:
    """
    One step of an amount cascade.

    Attributes:
        name: Short label, handy in logs and tests
        regex: Compiled pattern whose first group is the number
        currency: Currency implied by the pattern, None to infer from context
    """
    name: str
    regex: re.Pattern
    currency: Optional[Currency] = None

    def search(self, text: str) -> Optional[Decimal]:
        """First positive amount this pattern finds in the text"""
        for match in self.regex.finditer(text):
            amount = to_decimal(match.group(1))
            if amount is not None:
                return amount
        return None


def _pattern(name: str, regex: str, currency: Optional[Currency] = None, flags: int = 0) -> AmountPattern:
    return AmountPattern(name, re.compile(regex, re.IGNORECASE | flags), currency)


def _currency_pair(currency: Currency, before: str, after: str) -> List[AmountPattern]:
    """Marker-before-number and number-before-marker patterns for one currency"""
    code = currency.value.lower()
    return [
        _pattern(f"{code}-prefix", rf"(?:{before})\s*{NUMBER}", currency),
        _pattern(f"{code}-suffix", rf"{NUMBER}\s*(?:{after})", currency),
    ]


# Explicit currency markers, in priority order
CURRENCY_PATTERNS: List[AmountPattern] = [
    *_currency_pair(Currency.INR, r"\bRs\.?|\bINR|₹", r"Rs\b\.?|INR\b|₹"),
    *_currency_pair(Currency.USD, r"\bUSD|\bUS\$|(?<![A-Za-z])\$", r"USD\b|US\$"),
    *_currency_pair(Currency.EUR, r"\bEUR|€", r"EUR\b|€"),
    *_currency_pair(Currency.GBP, r"\bGBP|£", r"GBP\b|£"),
    *_currency_pair(Currency.AED, r"\bAED|\bDhs?\b\.?", r"AED\b|Dhs?\b"),
    *_currency_pair(Currency.SGD, r"\bSGD|\bS\$", r"SGD\b|S\$"),
    *_currency_pair(Currency.AUD, r"\bAUD|\bA\$", r"AUD\b|A\$"),
    *_currency_pair(Currency.CAD, r"\bCAD|\bC\$", r"CAD\b|C\$"),
    *_currency_pair(Currency.JPY, r"\bJPY|¥", r"JPY\b|¥"),
]

# Transaction verbs and bill totals followed (or preceded) by a bare amount
KEYWORD_PATTERNS: List[AmountPattern] = [
    _pattern(
        "keyword-before",
        rf"\b(?:debited|credited|paid|spent|received|grand\s*total|total|amount\s*due)\b[^\d\n]{{0,30}}{DECIMAL_NUMBER}",
    ),
    _pattern("keyword-after", rf"{DECIMAL_NUMBER}\s*(?:debited|credited)\b"),
]

_TOTALS = (
    r"\b(?:grand\s*total|total\s*(?:amount|due|payable)?|net\s*payable|to\s*pay"
    r"|amount\s*(?:due|payable)?|bill\s*amount|payable|subtotal)"
)
_TOTALS_BARE = (
    r"\b(?:grand\s*total|total\s*(?:amount|due|payable)?|net\s*payable|to\s*pay"
    r"|amount\s*(?:due|payable)?|bill\s*amount|payable)"
)

# Receipts, restaurant bills and payment-app screenshots
BILL_PATTERNS: List[AmountPattern] = [
    _pattern(
        "paid-to",
        rf"\b(?:paid|sent|received|transferred)\s+(?:to|from)?[^\d]*?(?:(?:₹|\brs\.?|\binr|\$|€|£)\s*)?{NUMBER}",
    ),
    _pattern("total-inr", rf"{_TOTALS}\s*:?\s*(?:₹|\brs\.?|\binr)\s*{NUMBER}", Currency.INR),
    _pattern("total-usd", rf"{_TOTALS}\s*:?\s*(?:\$|\busd)\s*{NUMBER}", Currency.USD),
    _pattern("total-eur", rf"{_TOTALS}\s*:?\s*(?:€|\beur)\s*{NUMBER}", Currency.EUR),
    _pattern("total-gbp", rf"{_TOTALS}\s*:?\s*(?:£|\bgbp)\s*{NUMBER}", Currency.GBP),
    _pattern("total-bare", rf"{_TOTALS_BARE}\s*:?\s*{DECIMAL_NUMBER}"),
    _pattern("rupee-symbol", rf"₹\s*{NUMBER}", Currency.INR),
    _pattern("rupee-code", rf"(?:\brs\.?|\binr)\s*{NUMBER}", Currency.INR),
    _pattern("dollar-symbol", rf"\$\s*{NUMBER}", Currency.USD),
    _pattern("euro-symbol", rf"€\s*{NUMBER}", Currency.EUR),
    _pattern("pound-symbol", rf"£\s*{NUMBER}", Currency.GBP),
    _pattern("standalone-line", rf"^\s*{DECIMAL_NUMBER}\s*$", flags=re.MULTILINE),
]

_CURRENCY_HINTS = [
    (re.compile(r"₹|\binr\b|\brs\.|\brs\s", re.IGNORECASE), Currency.INR),
    (re.compile(r"\$|\busd\b", re.IGNORECASE), Currency.USD),
    (re.compile(r"€|\beur\b", re.IGNORECASE), Currency.EUR),
    (re.compile(r"£|\bgbp\b", re.IGNORECASE), Currency.GBP),
    (re.compile(r"\baed\b|\bdirhams?\b", re.IGNORECASE), Currency.AED),
]

INDIA_CONTEXT = re.compile(
    r"\b(?:upi|phonepe|paytm|gpay|google\s+pay|bhim|neft|imps|rtgs|ifsc|hdfc|icici|sbi"
    r"|axis|kotak|yes\s+bank|idfc|cgst|sgst|gst)\b",
    re.IGNORECASE,
)


def infer_currency(text: str) -> Currency:
    """
    Infer currency from context when no pattern carried one.

    Explicit symbols and codes are checked first, then India-specific
    banking vocabulary (UPI, NEFT, bank names, GST). Anything else is
    Currency.UNKNOWN.
    """
    for hint, currency in _CURRENCY_HINTS:
        if hint.search(text):
            return currency

    if INDIA_CONTEXT.search(text):
        return Currency.INR

    return Currency.UNKNOWN


def run_cascade(patterns: Iterable[AmountPattern], text: str) -> Optional[AmountMatch]:
    """Evaluate patterns in order, first positive amount wins"""
    for pattern in patterns:
        amount = pattern.search(text)
        if amount is not None:
            currency = pattern.currency or infer_currency(text)
            return AmountMatch(amount, currency)
    return None


def find_largest_amount(text: str) -> Optional[Decimal]:
    """
    Largest two-decimal number in the text.

    On itemized bills the grand total is usually the largest figure.
    Values of 1 or less are ignored so percentages and counts don't win.
    """
    amounts = [
        amount
        for amount in (to_decimal(m.group(1)) for m in re.finditer(DECIMAL_NUMBER, text))
        if amount is not None and amount > 1
    ]
    return max(amounts) if amounts else None


def extract_amount(text: str, fallback_to_largest: bool = True) -> Optional[AmountMatch]:
    """
    Extract (amount, currency) from a message.

    Order:
    1. Currency-tagged patterns (CURRENCY_PATTERNS)
    2. Keyword-anchored bare amounts (KEYWORD_PATTERNS)
    3. Largest two-decimal number in the text
       (skipped when fallback_to_largest is False)

    Returns:
        AmountMatch, or None when nothing positive was found

    Example:
        >>> extract_amount("Total 500.00 Paid via UPI Rs 250")
        AmountMatch(amount=Decimal('250'), currency=<Currency.INR: 'INR'>)
    """
    if not text:
        return None

    match = run_cascade(CURRENCY_PATTERNS, text) or run_cascade(KEYWORD_PATTERNS, text)
    if match is not None:
        return match

    if not fallback_to_largest:
        return None

    largest = find_largest_amount(text)
    if largest is not None:
        return AmountMatch(largest, infer_currency(text))

    return None


def extract_bill_amount(text: str) -> Optional[AmountMatch]:
    """
    Extract (amount, currency) from a bill, receipt or payment screenshot.

    Tries bill phrase anchors ("paid to", "grand total", "net payable",
    "to pay", a decimal on its own line, ...) before falling back to the
    largest amount in the text.
    """
    if not text:
        return None

    match = run_cascade(BILL_PATTERNS, text)
    if match is not None:
        return match

    largest = find_largest_amount(text)
    if largest is not None:
        return AmountMatch(largest, infer_currency(text))

    return None
