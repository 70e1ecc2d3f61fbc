"""
Single-message parsing: bank SMS, shared notification text, bill and
receipt text.
"""
import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Union

from expense_parser.categorization.categories import OTHER, coerce_voice_category
from expense_parser.categorization.resolver import MerchantResolver
from expense_parser.domain.enums import Currency
from expense_parser.domain.models import MappingSnapshot, Transaction
from expense_parser.extraction.amount import extract_amount, extract_bill_amount
from expense_parser.extraction.dates import DateExtractor
from expense_parser.logging_setup import get_logger

logger = get_logger("expense_parser.extraction.message")

# A line made only of hyphens, en/em dashes or horizontal bars
_DASH_SEPARATOR = re.compile(r"^[ \t]*[-–—―]{2,}[ \t]*$", re.MULTILINE)
_BLANK_LINES = re.compile(r"\n[ \t]*\n")


def split_messages(text: str) -> List[str]:
    """
    Split a shared blob into individual messages.

    Messages are separated by blank lines or by lines of two or more dash
    characters. Empty segments are dropped.

    Example:
        >>> split_messages("Rs 100 paid to A\\n---\\nRs 200 paid to B")
        ['Rs 100 paid to A', 'Rs 200 paid to B']
    """
    if not text:
        return []

    normalized = text.replace("\r\n", "\n")
    normalized = _DASH_SEPARATOR.sub("", normalized)

    return [
        segment.strip()
        for segment in _BLANK_LINES.split(normalized)
        if segment.strip()
    ]


@dataclass
class MessageBatch:
    """
    Result of parsing a blob that may hold several messages.

    Segments without an amount land in ``unparsed`` so the caller can
    queue them for manual entry.
    """
    parsed: List[Transaction] = field(default_factory=list)
    unparsed: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.parsed) + len(self.unparsed)

    def __str__(self) -> str:
        return f"{len(self.parsed)} parsed, {len(self.unparsed)} need manual entry"


class MessageParser:
    """
    Turns one short text blob into at most one Transaction.

    The amount is mandatory. Merchant, category and date fall back to
    ("Unknown", "Other") and today.

    Usage:
        parser = MessageParser(snapshot)
        txn = parser.parse("Rs.1,250.00 debited from A/c XX1234 on 05-01-25 for SWIGGY order")
        # Transaction(2025-01-05, SWIGGY, INR 1250.00, Food)
    """

    def __init__(self, snapshot: Optional[MappingSnapshot] = None, today: Optional[date] = None):
        self.resolver = MerchantResolver(snapshot)
        self.dates = DateExtractor(today)

    def parse(self, text: str) -> Optional[Transaction]:
        """
        Parse one message.

        Currency-tagged and keyword-anchored amounts are tried first. Without
        either, the text is read as a bill or payment screenshot, whose
        anchors ("grand total", "to pay", ...) take precedence over the
        largest-number fallback.

        Returns:
            Transaction, or None when no positive amount was found
        """
        if not text or not text.strip():
            return None

        match = extract_amount(text, fallback_to_largest=False)
        if match is not None:
            merchant, category = self.resolver.resolve(text)
        else:
            match = extract_bill_amount(text)
            if match is None:
                logger.debug("No amount found in message: %.60r", text)
                return None
            merchant, category = self.resolver.resolve_bill_merchant(text)

        return Transaction(
            amount=match.amount,
            currency=match.currency,
            merchant=merchant,
            category=category,
            date=self.dates.extract(text) or self.dates.today,
            source_text=text,
        )

    def parse_many(self, text: str) -> MessageBatch:
        """Split a blob into messages and parse each one"""
        batch = MessageBatch()

        for segment in split_messages(text):
            transaction = self.parse(segment)
            if transaction is None:
                batch.unparsed.append(segment)
            else:
                batch.parsed.append(transaction)

        logger.info("Parsed %d of %d messages", len(batch.parsed), batch.total)
        return batch

    def from_structured(
        self,
        amount: Union[Decimal, int, float, str],
        category: Optional[str] = None,
        merchant: Optional[str] = None,
        on: Optional[date] = None,
    ) -> Transaction:
        """
        Build a record from pre-parsed parameters (e.g. a voice assistant).

        Extraction is skipped. A spoken category id ("food", "emi") expands
        to its full name; without one the category comes from the merchant
        name via the mapping table. The merchant defaults to the category.

        Raises:
            ValueError: If amount is not a positive number
        """
        try:
            value = Decimal(str(amount).replace(",", ""))
        except InvalidOperation:
            raise ValueError(f"Invalid amount: {amount!r}")
        if not value.is_finite():
            raise ValueError(f"Invalid amount: {amount!r}")

        if category:
            resolved_category = coerce_voice_category(category)
        elif merchant:
            resolved_category = self.resolver.category_for(merchant)
        else:
            resolved_category = OTHER

        label = merchant.strip().title() if merchant and merchant.strip() else resolved_category

        return Transaction(
            amount=value,
            currency=Currency.INR,
            merchant=label,
            category=resolved_category,
            date=on or self.dates.today,
            source_text=merchant or label,
        )
