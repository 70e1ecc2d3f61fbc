"""
Heuristic statement segmentation.

Recovers debit transactions from the flattened text of a bank or credit
card statement without knowing its layout. Every line that carries a
date opens a context window; the window supplies the amount, the
description and the debit/credit classification.
"""
import re
from datetime import date
from decimal import Decimal
from threading import Event
from typing import Iterator, List, Optional, Set, Tuple

from expense_parser.categorization.resolver import MerchantResolver
from expense_parser.config.settings import EngineSettings
from expense_parser.domain.enums import Currency
from expense_parser.domain.models import MappingSnapshot, Transaction
from expense_parser.extraction.amount import infer_currency, to_decimal
from expense_parser.extraction.dates import STATEMENT_DATE_PATTERNS, DateExtractor
from expense_parser.logging_setup import get_logger

logger = get_logger("expense_parser.extraction.segmenter")

FALLBACK_DESCRIPTION = "Bank Transaction"

DEBIT_MARKERS = re.compile(
    r"\b(?:DR|DEBIT|PAID|PURCHASE|POS|ATM|IMPS|NEFT|UPI|RTGS|WITHDRAWAL)\b",
    re.IGNORECASE,
)
CREDIT_MARKERS = re.compile(r"\b(?:CR|CREDIT(?:ED)?)\b", re.IGNORECASE)

# Two-decimal amount that is not part of a dotted date such as 05.01.25.
# A dot after a currency marker (Rs.1,250.00) is fine.
STATEMENT_AMOUNT = re.compile(r"(?<!\d)(?<!\d\.)(\d[\d,]*\.\d{2})(?![\d.])")

# Same amount with its currency marker, for description cleanup
_MARKED_AMOUNT = re.compile(
    r"(?:(?:₹|\bRs\.?|\bINR)\s*)?" + STATEMENT_AMOUNT.pattern,
    re.IGNORECASE,
)

_DESCRIPTION_NOISE = [
    *(pattern.regex for pattern in STATEMENT_DATE_PATTERNS),
    _MARKED_AMOUNT,
    re.compile(r"\b(?:DR|CR|DEBIT|CREDIT)\b", re.IGNORECASE),
    re.compile(r"\b\d{10,}\b"),  # reference numbers
]


class StatementSegmenter:
    """
    Splits statement text into debit transactions.

    Algorithm:
    1. Find lines holding a date
    2. Window = that line plus the next ``context_window_lines`` lines
    3. Keep the window if it has a debit marker or no credit marker
    4. First two-decimal number in the window is the amount
    5. Window text minus dates, amounts, DR/CR markers and reference
       numbers is the description
    6. Drop repeats of an already seen (date, amount) pair

    Usage:
        segmenter = StatementSegmenter(snapshot)
        transactions = segmenter.parse(statement_text)
    """

    def __init__(
        self,
        snapshot: Optional[MappingSnapshot] = None,
        settings: Optional[EngineSettings] = None,
        today: Optional[date] = None,
    ):
        self.settings = settings or EngineSettings()
        self.resolver = MerchantResolver(snapshot)
        self.dates = DateExtractor(today)

    def parse(self, text: str, cancel_event: Optional[Event] = None) -> List[Transaction]:
        """Segment the whole text, returns [] when nothing looks like a debit"""
        transactions = list(self.iter_transactions(text, cancel_event))
        logger.info("Heuristic scan found %d transactions", len(transactions))
        return transactions

    def iter_transactions(
        self,
        text: str,
        cancel_event: Optional[Event] = None,
    ) -> Iterator[Transaction]:
        """
        Yield transactions in document order.

        Args:
            text: Full statement text
            cancel_event: When set, the scan stops before the next line

        Yields:
            Transaction for each new (date, amount) pair
        """
        if not text:
            return

        lines = text.splitlines()
        document_currency = infer_currency(text)
        seen: Set[Tuple[date, Decimal]] = set()

        for index, raw_line in enumerate(lines):
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Statement scan cancelled at line %d of %d", index, len(lines))
                return

            line = raw_line.strip()
            if not line:
                continue

            txn_date = self.dates.extract(line, STATEMENT_DATE_PATTERNS)
            if txn_date is None:
                continue

            window = self._window(lines, index)
            transaction = self._from_window(window, txn_date, document_currency)
            if transaction is None:
                continue

            key = (transaction.date, transaction.amount)
            if key in seen:
                logger.debug("Skipping repeated %s %s", transaction.date, transaction.amount)
                continue
            seen.add(key)

            yield transaction

    def _window(self, lines: List[str], index: int) -> str:
        end = index + 1 + self.settings.context_window_lines
        return " ".join(line.strip() for line in lines[index:end])

    def _from_window(
        self,
        window: str,
        txn_date: date,
        document_currency: Currency,
    ) -> Optional[Transaction]:
        if not self.is_debit(window):
            return None

        match = STATEMENT_AMOUNT.search(window)
        if match is None:
            return None

        amount = to_decimal(match.group(1))
        if amount is None:
            return None

        description = self.describe(window)
        currency = infer_currency(window)
        if currency is Currency.UNKNOWN:
            currency = document_currency

        return Transaction(
            amount=amount,
            currency=currency,
            merchant=description,
            category=self.resolver.category_for(description),
            date=txn_date,
            source_text=window,
        )

    @staticmethod
    def is_debit(window: str) -> bool:
        """Debit marker present, or at least no credit marker"""
        return bool(DEBIT_MARKERS.search(window)) or not CREDIT_MARKERS.search(window)

    def describe(self, window: str) -> str:
        """Merchant-ish description left after stripping statement noise"""
        description = window
        for noise in _DESCRIPTION_NOISE:
            description = noise.sub("", description)

        description = " ".join(description.split())

        limit = self.settings.merchant_max_length
        if len(description) > limit:
            description = description[:limit] + "..."

        return description or FALLBACK_DESCRIPTION
