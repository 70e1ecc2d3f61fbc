"""
Merchant and category resolution for extracted transactions.

Resolves a merchant label and spending category from raw text using a
chain of responsibility over a read-only snapshot of the biller mapping
table.

Quick Start:
    >>> from expense_parser.categorization import MerchantResolver
    >>> from expense_parser.domain.models import MappingSnapshot
    >>>
    >>> resolver = MerchantResolver(MappingSnapshot.from_dict({"SWIGGY": "Food"}))
    >>> merchant, category = resolver.resolve("Rs 250 paid for SWIGGY order")
    >>> print(f"{merchant} -> {category}")
"""
from expense_parser.categorization.resolver import MerchantResolver
from expense_parser.categorization.base import MerchantMatch, MerchantRule
from expense_parser.categorization.rules import (
    KeywordMappingRule,
    PayeePatternRule,
    PayeeNextLineRule,
    FirstTextLineRule,
    DefaultRule
)
from expense_parser.categorization import categories

__all__ = [
    "MerchantResolver",
    "MerchantMatch",
    "MerchantRule",
    "KeywordMappingRule",
    "PayeePatternRule",
    "PayeeNextLineRule",
    "FirstTextLineRule",
    "DefaultRule",
    "categories",
]
