from abc import ABC, abstractmethod
from typing import NamedTuple, Optional


class MerchantMatch(NamedTuple):
    """Merchant label and category resolved from a piece of text"""
    merchant: str
    category: str


class MerchantRule(ABC):
    """
    Abstract base class for all merchant resolution rules.

    Implements Chain of Responsibility:
    - Each rule tries to resolve a merchant from the text
    - If it can't it passes to the next rule
    - Rules are tried in priority order

    Usage:
        Create chain: specific -> general -> default
        ```
        keyword_rule = KeywordMappingRule(snapshot)
        default_rule = DefaultRule()

        keyword_rule.set_next(default_rule)

        match = keyword_rule.resolve("Rs 250 paid to SWIGGY")
        ```
    """

    def __init__(self):
        self._next_rule: Optional['MerchantRule'] = None


    def set_next(self, rule: 'MerchantRule') -> 'MerchantRule':
        """
        Set the next rule in the chain.

        Args:
            rule: The next rule to try if this one doesn't match

        Returns:
            The rule that was set (for chaining)

        Example:
            `rule1.set_next(rule2).set_next(rule3)`
        """
        self._next_rule = rule
        return rule

    @abstractmethod
    def _matches(self, text: str) -> bool:
        """
        Check if this rule can resolve a merchant from the text.

        Args:
            text: Raw message or document text

        Returns:
            True if this rule can resolve the text
        """
        pass


    @abstractmethod
    def _get_match(self, text: str) -> MerchantMatch:
        """
        Get the merchant and category for the text.

        Called only if _matches() returns True.
        """
        pass


    def resolve(self, text: str) -> Optional[MerchantMatch]:
        """
        Attempt to resolve a merchant.

        Args:
            text: Raw message or document text

        Returns:
            MerchantMatch, or None if no rule in the chain matched
        """
        if self._matches(text):
            return self._get_match(text)

        if self._next_rule:
            return self._next_rule.resolve(text)

        return None

    def __repr__(self):
        return f"{self.__class__.__name__}()"
