"""
Service layer models - DTOs for service operations.

These models represent the results of service operations, not domain entities.
"""
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional

from expense_parser.domain.enums import ExtractionOutcome, StatementType
from expense_parser.domain.models import Transaction


@dataclass
class DocumentImportResult:
    """
    Result of extracting transactions from one document.

    Provides feedback about what happened during import:
    - Which path produced the records (AI or heuristic)
    - Whether the document had nothing extractable
    - Spending totals for a quick preview
    """
    filepath: str
    statement_type: StatementType
    outcome: ExtractionOutcome
    parsed_by_ai: bool = False
    transactions: List[Transaction] = field(default_factory=list)
    reason: Optional[str] = None

    @property
    def success(self) -> bool:
        """Import is successful if at least one transaction was extracted"""
        return self.outcome is ExtractionOutcome.SUCCESS and bool(self.transactions)

    @property
    def totals_by_category(self) -> Dict[str, Decimal]:
        """Spending per category, largest first"""
        totals: Dict[str, Decimal] = defaultdict(Decimal)
        for txn in self.transactions:
            totals[txn.category] += txn.amount
        return dict(sorted(totals.items(), key=lambda x: x[1], reverse=True))

    @property
    def totals_by_currency(self) -> Dict[str, Decimal]:
        """Spending per currency code"""
        totals: Dict[str, Decimal] = defaultdict(Decimal)
        for txn in self.transactions:
            totals[txn.currency.value] += txn.amount
        return dict(totals)

    def __str__(self) -> str:
        "Human-readable summary"
        source = "AI-assisted" if self.parsed_by_ai else "heuristic"
        lines = [
            f"Import summary for {self.statement_type.value} statement:",
            f" 📄 File: {self.filepath}",
            f" 🔎 Outcome: {self.outcome.value} ({source})",
            f" ✅ Transactions: {len(self.transactions)}",
        ]

        if self.reason:
            lines.append(f"  ❌ {self.reason}")

        return "\n".join(lines)
