import asyncio
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Iterable, List, Optional, Union

from expense_parser.categorization import MerchantResolver
from expense_parser.config.settings import EngineSettings
from expense_parser.domain.enums import StatementType
from expense_parser.domain.models import Transaction
from expense_parser.extraction.ai import AIExtractor
from expense_parser.extraction.message import MessageBatch, MessageParser
from expense_parser.extraction.segmenter import StatementSegmenter
from expense_parser.extraction.selector import ExtractionStrategySelector
from expense_parser.logging_setup import get_logger
from expense_parser.readers.factory import ReaderFactory
from expense_parser.repositories.base import MappingRepository
from expense_parser.services.models import DocumentImportResult

logger = get_logger("expense_parser.services.extraction_service")


class ExtractionService:
    """
    Entry point for callers: messages, voice entries and documents.

    Every operation takes a fresh snapshot of the mapping table, so edits
    made through the repository apply to the next call.
    """

    def __init__(
        self,
        repository: MappingRepository,
        ai_extractor: Optional[AIExtractor] = None,
        settings: Optional[EngineSettings] = None,
        today: Optional[date] = None,
    ):
        self.repository = repository
        self.ai_extractor = ai_extractor
        self.settings = settings or EngineSettings.from_config()
        self.today = today

    def _message_parser(self) -> MessageParser:
        return MessageParser(self.repository.snapshot(), today=self.today)

    def parse_message(self, text: str) -> Optional[Transaction]:
        """Parse a single message, None when it has no amount"""
        return self._message_parser().parse(text)

    def parse_messages(self, text: str) -> MessageBatch:
        """
        Parse shared text that may hold several messages.

        Example:
            batch = service.parse_messages(clipboard_text)
            for txn in batch.parsed:
                ...
            # batch.unparsed need manual entry
        """
        return self._message_parser().parse_many(text)

    def add_structured(
        self,
        amount: Union[Decimal, int, float, str],
        category: Optional[str] = None,
        merchant: Optional[str] = None,
        on: Optional[date] = None,
    ) -> Transaction:
        """Record from voice-assistant parameters, extraction is skipped"""
        return self._message_parser().from_structured(amount, category=category, merchant=merchant, on=on)

    async def import_document_async(
        self,
        filepath: Path,
        statement_type: StatementType = StatementType.BANK,
    ) -> DocumentImportResult:
        """
        Read a document and extract its transactions.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If no reader handles the file type or it can't be read
        """
        reader = ReaderFactory.for_file(str(filepath))
        text = reader.read_text(str(filepath))
        logger.info("Read %d chars from %s", len(text), filepath)

        segmenter = StatementSegmenter(self.repository.snapshot(), self.settings, today=self.today)
        selector = ExtractionStrategySelector(segmenter, self.ai_extractor, self.settings)
        result = await selector.extract(text)

        return DocumentImportResult(
            filepath=str(filepath),
            statement_type=statement_type,
            outcome=result.outcome,
            parsed_by_ai=result.parsed_by_ai,
            transactions=result.transactions,
            reason=result.reason,
        )

    def import_document(
        self,
        filepath: Path,
        statement_type: StatementType = StatementType.BANK,
    ) -> DocumentImportResult:
        """Blocking wrapper around import_document_async"""
        return asyncio.run(self.import_document_async(filepath, statement_type))

    def recategorize(self, transactions: Iterable[Transaction]) -> List[Transaction]:
        """
        Re-run merchant/category resolution with the current mapping table.

        Amounts, dates and source text are untouched.
        """
        resolver = MerchantResolver(self.repository.snapshot())
        return resolver.recategorize_many(transactions)
