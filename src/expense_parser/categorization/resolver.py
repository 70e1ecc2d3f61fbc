from typing import Iterable, List, Optional

from expense_parser.categorization.base import MerchantMatch, MerchantRule
from expense_parser.categorization.rules import (
    KeywordMappingRule,
    PayeePatternRule,
    PayeeNextLineRule,
    FirstTextLineRule,
    DefaultRule
)
from expense_parser.categorization.categories import OTHER, UNKNOWN_MERCHANT, coerce_category
from expense_parser.domain.models import MappingSnapshot, Transaction
from expense_parser.logging_setup import get_logger

logger = get_logger("expense_parser.categorization.resolver")


class MerchantResolver:
    """
    Resolves (merchant, category) from text using a mapping table snapshot.

    Builds two chains of rules:

    Message chain:
    1. Known biller keywords (mapping table)
    2. Default ("Unknown", "Other")

    Bill chain (receipts and payment screenshots):
    1. Payee phrasing ("Paid to ...", "Merchant: ...")
    2. Payee on the line after a "Paid to" header
    3. Known biller keywords
    4. First line that reads like a shop name
    5. Default

    Usage:
        resolver = MerchantResolver(snapshot)
        merchant, category = resolver.resolve(sms_text)

        # After the mapping table changes
        resolver = MerchantResolver(new_snapshot)
        updated = resolver.recategorize_many(transactions)
    """

    def __init__(self, snapshot: Optional[MappingSnapshot] = None):
        """
        Initialize the resolver.

        Args:
            snapshot: Read-only copy of the mapping table. An empty table
                resolves everything to ("Unknown", "Other").
        """
        self.snapshot = snapshot if snapshot is not None else MappingSnapshot()
        self._keyword_rule = KeywordMappingRule(self.snapshot)

        self._message_chain: MerchantRule = self._build_chain([
            KeywordMappingRule(self.snapshot),
            DefaultRule(UNKNOWN_MERCHANT, OTHER),
        ])
        self._bill_chain: MerchantRule = self._build_chain([
            PayeePatternRule(self.category_for),
            PayeeNextLineRule(self.category_for),
            KeywordMappingRule(self.snapshot),
            FirstTextLineRule(self.category_for),
            DefaultRule(UNKNOWN_MERCHANT, OTHER),
        ])

    @staticmethod
    def _build_chain(rules: List[MerchantRule]) -> MerchantRule:
        for i in range(len(rules) - 1):
            rules[i].set_next(rules[i + 1])
        return rules[0]

    def resolve(self, text: str) -> MerchantMatch:
        """
        Resolve merchant and category for a message.

        Args:
            text: Raw message text

        Returns:
            MerchantMatch; ("Unknown", "Other") when no keyword matches

        Example:
            ```
            >>> resolver = MerchantResolver(MappingSnapshot.from_dict({"SWIGGY": "Food"}))
            >>> resolver.resolve("Rs 250 debited for Swiggy order")
            MerchantMatch(merchant='SWIGGY', category='Food')
            ```
        """
        match = self._message_chain.resolve(text)

        assert match is not None, "Rule chain should never return None"

        return match

    def resolve_bill_merchant(self, text: str) -> MerchantMatch:
        """Resolve the payee of a bill, receipt or payment screenshot"""
        match = self._bill_chain.resolve(text)

        assert match is not None, "Rule chain should never return None"

        logger.debug("Bill merchant resolved to %s (%s)", match.merchant, match.category)
        return match

    def category_for(self, label: str) -> str:
        """Category for a free-text merchant label, "Other" when unmapped"""
        hit = self._keyword_rule.find(label)
        if hit is None:
            return OTHER
        _, entry = hit
        return coerce_category(entry.category)

    def recategorize(self, transaction: Transaction) -> Transaction:
        """
        Re-run resolution over a transaction's source text.

        Amount, currency, date and source text are carried over untouched,
        so the result only depends on the current mapping snapshot.
        """
        merchant, category = self.resolve(transaction.source_text)
        return Transaction(
            amount=transaction.amount,
            currency=transaction.currency,
            merchant=merchant,
            category=category,
            date=transaction.date,
            source_text=transaction.source_text,
            parsed_by_ai=transaction.parsed_by_ai,
        )

    def recategorize_many(self, transactions: Iterable[Transaction]) -> List[Transaction]:
        """Re-categorize a batch of transactions against the current snapshot"""
        return [self.recategorize(txn) for txn in transactions]

    def get_rule_chain_info(self) -> str:
        """
        Get information about the message rule chain.

        Useful for debugging and understanding which rules are active.
        """
        rules = []
        current = self._message_chain
        priority = 1

        while current:
            rules.append(f"{priority}. {current}")
            current = current._next_rule
            priority += 1

        return "\n".join(rules)

    def __repr__(self) -> str:
        return f"MerchantResolver({len(self.snapshot)} mappings)"
