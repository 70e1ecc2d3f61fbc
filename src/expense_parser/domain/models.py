from dataclasses import dataclass, field, replace
from decimal import Decimal
from datetime import date
from typing import Dict, Iterable, Optional, Tuple
from expense_parser.domain.enums import Currency

@dataclass(frozen=True)
class Transaction:
    """Core domain model representing a single extracted expense"""
    amount: Decimal
    currency: Currency
    merchant: str
    category: str
    date: date
    source_text: str
    parsed_by_ai: bool = False

    def __post_init__(self):
        """A record only exists with a positive amount"""
        if self.amount is None or self.amount <= 0:
            raise ValueError(f"Transaction amount must be positive, got {self.amount}")

    def with_overrides(
        self,
        date: Optional[date] = None,
        category: Optional[str] = None,
        merchant: Optional[str] = None,
    ) -> "Transaction":
        """Return a new record with user amendments applied"""
        changes = {}
        if date is not None:
            changes["date"] = date
        if category is not None:
            changes["category"] = category
        if merchant is not None:
            changes["merchant"] = merchant
        return replace(self, **changes)

    def __repr__(self):
        return (
            f"Transaction({self.date}, {self.merchant[:30]}, "
            f"{self.currency.value} {self.amount}, {self.category})"
        )


@dataclass(frozen=True)
class MappingEntry:
    """A biller keyword and the category it maps to"""
    keyword: str
    category: str

    def __post_init__(self):
        # keywords are stored case-normalized
        object.__setattr__(self, "keyword", self.keyword.strip().upper())


@dataclass(frozen=True)
class MappingSnapshot:
    """
    Point-in-time, read-only copy of the biller mapping table.

    The extraction engine receives one snapshot per call and never
    mutates it, so a parse is a pure function of (text, snapshot).
    """
    entries: Tuple[MappingEntry, ...] = field(default_factory=tuple)

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[str, str]]) -> "MappingSnapshot":
        """Build a snapshot from (keyword, category) pairs, later keywords win"""
        by_keyword: Dict[str, MappingEntry] = {}
        for keyword, category in pairs:
            entry = MappingEntry(keyword, category)
            if entry.keyword:
                by_keyword[entry.keyword] = entry
        return cls(tuple(by_keyword.values()))

    @classmethod
    def from_dict(cls, mapping: Dict[str, str]) -> "MappingSnapshot":
        return cls.from_pairs(mapping.items())

    def as_dict(self) -> Dict[str, str]:
        return {entry.keyword: entry.category for entry in self.entries}

    def category_for(self, keyword: str) -> Optional[str]:
        """Case-insensitive exact lookup"""
        return self.as_dict().get(keyword.strip().upper())

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)
