"""
Contract for an optional AI-assisted statement extractor.

The engine only owns the prompt it sends and the tolerant reading of the
JSON that comes back. How the completion is produced (on-device model,
hosted API, ...) is up to the AIExtractor implementation plugged in.
"""
import json
from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from expense_parser.categorization.categories import CATEGORIES, coerce_category
from expense_parser.domain.enums import AICapabilityStatus
from expense_parser.domain.models import Transaction
from expense_parser.extraction.amount import infer_currency
from expense_parser.extraction.dates import parse_first
from expense_parser.logging_setup import get_logger

logger = get_logger("expense_parser.extraction.ai")

# Date shapes accepted in a completion, tried in order
AI_DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y", "%d-%m-%Y", "%m/%d/%Y", "%d/%m/%y", "%d-%m-%y")

MAX_DESCRIPTION_LENGTH = 50
FALLBACK_DESCRIPTION = "Bank Transaction"

PROMPT_TEMPLATE = """You are a bank/credit card statement parser. Extract all EXPENSE transactions (money spent/charged).

For each transaction, extract:
- date: transaction date in DD/MM/YYYY format
- description: merchant/vendor name only (max {max_description} chars)
- amount: numeric value (positive number, no currency symbol or commas)
- category: one of [{categories}]

IMPORTANT RULES:
- For CREDIT CARD statements: Extract purchases, charges, fees (EXCLUDE payments, credits, refunds)
- For BANK statements: Extract debits, withdrawals, transfers OUT (EXCLUDE credits, deposits, incoming)
- Look for keywords like: POS, ATM, UPI, IMPS, NEFT, purchase, paid, charged
- Skip entries with: CREDIT, PAYMENT RECEIVED, REFUND, REVERSAL, CASHBACK
- Return ONLY a JSON array, no explanation or markdown

Statement Text:
{text}

JSON Response:
"""


class AICapabilityError(Exception):
    """The AI capability failed to produce a completion"""
    pass


class ContextWindowExceededError(AICapabilityError):
    """The prompt did not fit the capability's context window"""
    pass


class AIExtractor(ABC):
    """
    Abstract base for AI completion capabilities.

    Implementations report whether they can be used and turn a prompt into
    raw completion text. Transport problems are raised as
    AICapabilityError (or ContextWindowExceededError).
    """

    @property
    @abstractmethod
    def status(self) -> AICapabilityStatus:
        """UNAVAILABLE, DISABLED or ENABLED"""
        pass

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        """
        Return the raw completion for a prompt.

        Raises:
            AICapabilityError: On transport failure
            ContextWindowExceededError: If the prompt is too long
        """
        pass


def truncate_at_line(text: str, max_chars: int) -> str:
    """Cut text to at most max_chars, at the last line break when there is one"""
    if len(text) <= max_chars:
        return text

    prefix = text[:max_chars]
    cut = prefix.rfind("\n")
    return prefix[:cut] if cut > 0 else prefix


def build_prompt(text: str, max_chars: int) -> str:
    """Extraction prompt for a statement, text limited to max_chars"""
    truncated = truncate_at_line(text, max_chars)
    if len(truncated) < len(text):
        logger.info("Statement text truncated from %d to %d chars", len(text), len(truncated))

    return PROMPT_TEMPLATE.format(
        max_description=MAX_DESCRIPTION_LENGTH,
        categories=", ".join(CATEGORIES),
        text=truncated,
    )


def _extract_json_array(response: str) -> Optional[str]:
    cleaned = response.replace("```json", "").replace("```", "").strip()

    start = cleaned.find("[")
    end = cleaned.rfind("]")
    if start < 0 or end <= start:
        return None
    return cleaned[start:end + 1]


def _to_transaction(item: Dict[str, Any], document_text: str) -> Optional[Transaction]:
    txn_date = parse_first(str(item.get("date", "")), AI_DATE_FORMATS)
    if txn_date is None:
        logger.debug("Unreadable date in AI item: %r", item.get("date"))
        return None

    try:
        amount = Decimal(str(item.get("amount", "")).replace(",", ""))
    except InvalidOperation:
        return None
    if not amount.is_finite() or amount <= 0:
        return None

    description = " ".join(str(item.get("description") or "").split())
    description = description[:MAX_DESCRIPTION_LENGTH] or FALLBACK_DESCRIPTION

    return Transaction(
        amount=amount,
        currency=infer_currency(document_text),
        merchant=description,
        category=coerce_category(item.get("category")),
        date=txn_date,
        source_text=description,
        parsed_by_ai=True,
    )


def parse_ai_response(response: str, document_text: str = "") -> List[Transaction]:
    """
    Read transactions out of a completion.

    Markdown fences are stripped and the outermost JSON array is decoded.
    Items with an unreadable date or a non-positive amount are dropped and
    unknown categories become "Other". Anything malformed yields [].

    Args:
        response: Raw completion text
        document_text: Statement text, used to infer the currency
    """
    if not response:
        return []

    payload = _extract_json_array(response)
    if payload is None:
        logger.warning("No JSON array in AI response")
        return []

    try:
        items = json.loads(payload)
    except json.JSONDecodeError as e:
        logger.warning("Malformed JSON in AI response: %s", e)
        return []

    if not isinstance(items, list):
        return []

    transactions = []
    for item in items:
        if not isinstance(item, dict):
            continue
        transaction = _to_transaction(item, document_text)
        if transaction is not None:
            transactions.append(transaction)

    logger.debug("Decoded %d of %d AI items", len(transactions), len(items))
    return transactions
