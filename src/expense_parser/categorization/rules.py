import re
from typing import Callable, List, Optional, Tuple

from expense_parser.categorization.base import MerchantMatch, MerchantRule
from expense_parser.categorization.categories import OTHER, UNKNOWN_MERCHANT, coerce_category
from expense_parser.domain.models import MappingEntry, MappingSnapshot

# Label used for merchants pulled from free text, capped at this length
MAX_MERCHANT_LENGTH = 50

CategoryLookup = Callable[[str], str]


class KeywordMappingRule(MerchantRule):
    """
    Rule that scans text for known biller keywords from the mapping table.

    Keywords are tried longest first so that "APPLE SERVICES" is preferred
    over "APPLE" when both sit at the same position. Among all keywords
    found, the one occurring earliest in the text wins.

    Matching is plain case-insensitive substring search, so short
    keywords also hit inside words ("VI" in "via").

    Example:
        ```
        rule = KeywordMappingRule(MappingSnapshot.from_dict({
            "SWIGGY": "Food",
            "UBER": "Transport",
        }))
        rule.resolve("UBER trip, then SWIGGY order")
        # MerchantMatch(merchant='UBER', category='Transport')
        ```
    """

    def __init__(self, snapshot: MappingSnapshot):
        super().__init__()
        self.snapshot = snapshot

        # sorted() is stable: equal-length keywords keep table order
        self._ordered: List[MappingEntry] = sorted(
            snapshot.entries,
            key=lambda entry: len(entry.keyword),
            reverse=True
        )

    def find(self, text: str) -> Optional[Tuple[int, MappingEntry]]:
        """Return (position, entry) of the winning keyword, if any"""
        text_upper = text.upper()

        hits: List[Tuple[int, MappingEntry]] = []
        for entry in self._ordered:
            position = text_upper.find(entry.keyword)
            if position >= 0:
                hits.append((position, entry))

        if not hits:
            return None

        # min() keeps the first of equal positions, i.e. the longest keyword
        return min(hits, key=lambda hit: hit[0])

    def _matches(self, text: str) -> bool:
        return self.find(text) is not None

    def _get_match(self, text: str) -> MerchantMatch:
        hit = self.find(text)
        if hit is None:
            raise RuntimeError("_get_match called but no keyword found")

        _, entry = hit
        return MerchantMatch(entry.keyword, coerce_category(entry.category))

    def __repr__(self):
        return f"KeywordMappingRule({len(self._ordered)} keywords)"


class PayeePatternRule(MerchantRule):
    """
    Rule that reads the payee from payment-app phrasing.

    Handles "Paid to Ramesh Stores", "Received from ...", "Merchant: ...",
    "Payee: ..." and similar, on a single line.
    """

    PATTERNS = [
        r"(?:paid|sent|transferred)[ \t]+to[ \t]+(.+)",
        r"(?:received|got)[ \t]+from[ \t]+(.+)",
        r"\bto[ \t]*:[ \t]*(.+)",
        r"\bfrom[ \t]*:[ \t]*(.+)",
        r"\bmerchant[ \t]*:[ \t]*(.+)",
        r"\bpayee[ \t]*:[ \t]*(.+)",
    ]

    # Leading run of name-like words
    NAME_PATTERN = re.compile(r"[A-Za-z][A-Za-z&'.-]*(?:[ \t]+[A-Za-z][A-Za-z&'.-]*)*")
    TRAILING_WORDS = re.compile(r"[ \t]+(?:on|via|using|for|at|ref|upi)\b.*$", re.IGNORECASE)

    def __init__(self, category_lookup: CategoryLookup):
        super().__init__()
        self.category_lookup = category_lookup
        self._compiled = [re.compile(p, re.IGNORECASE) for p in self.PATTERNS]

    def _find_name(self, text: str) -> Optional[str]:
        for pattern in self._compiled:
            for match in pattern.finditer(text):
                name_match = self.NAME_PATTERN.match(match.group(1).strip())
                if not name_match:
                    continue
                name = self.TRAILING_WORDS.split(name_match.group(0))[0].strip(" .-")
                if len(name) >= 3:
                    return name[:MAX_MERCHANT_LENGTH].title()
        return None

    def _matches(self, text: str) -> bool:
        return self._find_name(text) is not None

    def _get_match(self, text: str) -> MerchantMatch:
        name = self._find_name(text)
        if name is None:
            raise RuntimeError("_get_match called but no payee found")
        return MerchantMatch(name, self.category_lookup(name))


class PayeeNextLineRule(MerchantRule):
    """
    Rule for screenshots where the payee sits on the line after
    a "Paid to" style header.
    """

    HEADERS = ("paid to", "sent to", "transferred to", "received from")
    NUMERIC_ONLY = re.compile(r"^[\d.,\s]+$")

    def __init__(self, category_lookup: CategoryLookup):
        super().__init__()
        self.category_lookup = category_lookup

    def _find_name(self, text: str) -> Optional[str]:
        lines = [line.strip() for line in text.splitlines() if line.strip()]

        for index, line in enumerate(lines[:-1]):
            if not any(header in line.lower() for header in self.HEADERS):
                continue

            candidate = lines[index + 1]
            # UPI ids and bare amounts are not names
            if "@" in candidate or self.NUMERIC_ONLY.match(candidate):
                continue
            return candidate[:MAX_MERCHANT_LENGTH].strip()

        return None

    def _matches(self, text: str) -> bool:
        return self._find_name(text) is not None

    def _get_match(self, text: str) -> MerchantMatch:
        name = self._find_name(text)
        if name is None:
            raise RuntimeError("_get_match called but no payee line found")
        return MerchantMatch(name, self.category_lookup(name))


class FirstTextLineRule(MerchantRule):
    """
    Fallback for receipts: the first line that reads like a shop name.

    Skips numbers, dates, totals and UPI ids.
    """

    NOT_A_NAME = re.compile(r"^[\d.,/\-\s]+$")
    SKIP_PREFIXES = ("total", "amount")

    def __init__(self, category_lookup: CategoryLookup):
        super().__init__()
        self.category_lookup = category_lookup

    def _find_name(self, text: str) -> Optional[str]:
        for line in text.splitlines():
            trimmed = line.strip()
            if len(trimmed) < 3:
                continue
            if self.NOT_A_NAME.match(trimmed):
                continue
            if trimmed.lower().startswith(self.SKIP_PREFIXES):
                continue
            if "@" in trimmed:
                continue
            return trimmed[:MAX_MERCHANT_LENGTH]
        return None

    def _matches(self, text: str) -> bool:
        return self._find_name(text) is not None

    def _get_match(self, text: str) -> MerchantMatch:
        name = self._find_name(text)
        if name is None:
            raise RuntimeError("_get_match called but no text line found")
        return MerchantMatch(name, self.category_lookup(name))


class DefaultRule(MerchantRule):
    """
    Fallback rule that always matches.

    Should be the last rule in the chain.
    """

    def __init__(self, merchant: str = UNKNOWN_MERCHANT, category: str = OTHER):
        super().__init__()
        self.merchant = merchant
        self.category = coerce_category(category)

    def _matches(self, _: str) -> bool:
        """Always matches"""
        return True

    def _get_match(self, _: str) -> MerchantMatch:
        return MerchantMatch(self.merchant, self.category)

    def __repr__(self) -> str:
        return f"DefaultRule('{self.merchant}', '{self.category}')"
