import pytest
from datetime import date
from typing import Optional

from expense_parser.domain.enums import AICapabilityStatus
from expense_parser.domain.models import MappingSnapshot
from expense_parser.extraction.ai import AIExtractor
from expense_parser.readers.factory import ReaderFactory

@pytest.fixture
def today() -> date:
    """Fixed 'today' so year correction and date defaults are stable"""
    return date(2026, 3, 1)

@pytest.fixture
def snapshot() -> MappingSnapshot:
    """Small mapping table used across tests"""
    return MappingSnapshot.from_pairs([
        ("SWIGGY", "Food"),
        ("ZOMATO", "Food"),
        ("UBER", "Transport"),
        ("AMAZON", "Shopping"),
        ("APPLE", "Shopping"),
        ("APPLE SERVICES", "Subscriptions"),
        ("NETFLIX", "Entertainment"),
    ])

@pytest.fixture
def statement_text() -> str:
    """Flattened bank statement with a repeated row and a credit"""
    return "\n".join([
        "HDFC BANK STATEMENT",
        "Date Narration Amount",
        "05/01/25 UPI/SWIGGY/ORDER 499.00 DR",
        "05/01/25 UPI/SWIGGY/ORDER 499.00 DR",
        "07/01/25 POS AMAZON RETAIL 1,299.00 DR",
        "08/01/25 SALARY 50,000.00 CR",
    ])

@pytest.fixture
def clean_reader_registry():
    """Empty, unlocked reader registry for the duration of a test"""
    ReaderFactory._registry = {}
    ReaderFactory._locked = False
    yield
    ReaderFactory._registry = {}
    ReaderFactory._locked = False


class StubAIExtractor(AIExtractor):
    """
    AI capability that replays canned responses.

    Each entry is either a completion string or an exception to raise.
    """

    def __init__(self, responses=None, status: AICapabilityStatus = AICapabilityStatus.ENABLED):
        self._status = status
        self.responses = list(responses or [])
        self.prompts = []

    @property
    def status(self) -> AICapabilityStatus:
        return self._status

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        response: Optional[object] = self.responses.pop(0) if self.responses else "[]"
        if isinstance(response, Exception):
            raise response
        return response

@pytest.fixture
def stub_ai():
    """Factory for StubAIExtractor instances"""
    return StubAIExtractor
