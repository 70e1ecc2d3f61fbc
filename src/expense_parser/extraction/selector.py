"""
Chooses between AI-assisted and heuristic statement extraction.
"""
import asyncio
import threading
from dataclasses import dataclass, field
from typing import List, Optional

from expense_parser.config.settings import EngineSettings
from expense_parser.domain.enums import AICapabilityStatus, ExtractionOutcome
from expense_parser.domain.models import Transaction
from expense_parser.extraction.ai import AIExtractor, build_prompt, parse_ai_response
from expense_parser.extraction.segmenter import StatementSegmenter
from expense_parser.logging_setup import get_logger

logger = get_logger("expense_parser.extraction.selector")


@dataclass
class ExtractionResult:
    """
    Outcome of extracting transactions from one document.

    ``parsed_by_ai`` tells callers which path produced the records so they
    can show a different level of trust.
    """
    transactions: List[Transaction] = field(default_factory=list)
    parsed_by_ai: bool = False
    outcome: ExtractionOutcome = ExtractionOutcome.NO_TRANSACTIONS_FOUND
    reason: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.outcome is ExtractionOutcome.SUCCESS

    def __str__(self) -> str:
        source = "AI" if self.parsed_by_ai else "heuristic"
        if self.success:
            return f"{len(self.transactions)} transactions ({source})"
        return f"{self.outcome.value}: {self.reason}" if self.reason else self.outcome.value


class ExtractionStrategySelector:
    """
    Runs the AI-assisted path when it is usable, the heuristic path otherwise.

    State machine:
    1. AI enabled: try it with the full prompt budget
    2. Empty result or failure: one retry with the smaller budget
    3. Still nothing, or AI unavailable/disabled: heuristic segmenter

    The heuristic path never runs alongside the AI attempt. AI failures
    are logged and never reach the caller. Cancelling ``extract`` stops
    the heuristic scan and propagates CancelledError.

    Usage:
        selector = ExtractionStrategySelector(StatementSegmenter(snapshot), my_extractor, settings)
        result = await selector.extract(statement_text)
    """

    def __init__(
        self,
        segmenter: StatementSegmenter,
        ai_extractor: Optional[AIExtractor] = None,
        settings: Optional[EngineSettings] = None,
    ):
        self.segmenter = segmenter
        self.ai_extractor = ai_extractor
        self.settings = settings or EngineSettings()

    @property
    def ai_status(self) -> AICapabilityStatus:
        """
        Effective AI status.

        UNAVAILABLE without a capability, DISABLED when either the
        capability or the user setting switches it off.
        """
        if self.ai_extractor is None:
            return AICapabilityStatus.UNAVAILABLE

        status = self.ai_extractor.status
        if status is AICapabilityStatus.ENABLED and not self.settings.ai_enabled:
            return AICapabilityStatus.DISABLED
        return status

    async def extract(self, text: str) -> ExtractionResult:
        """
        Extract transactions from a statement's text.

        Returns:
            ExtractionResult with outcome SUCCESS, NO_TRANSACTIONS_FOUND or
            EXTRACTION_FAILED
        """
        if not text or not text.strip():
            return ExtractionResult(reason="Document has no text")

        status = self.ai_status
        if status is AICapabilityStatus.ENABLED:
            transactions = await self._extract_with_ai(text)
            if transactions:
                logger.info("AI extracted %d transactions", len(transactions))
                return ExtractionResult(transactions, True, ExtractionOutcome.SUCCESS)
            logger.info("AI found nothing, falling back to heuristics")
        else:
            logger.debug("AI %s, using heuristics", status.value.lower())

        return await self._extract_with_heuristics(text)

    async def _extract_with_ai(self, text: str) -> List[Transaction]:
        budgets = (self.settings.max_prompt_chars, self.settings.retry_prompt_chars)

        for attempt, budget in enumerate(budgets, start=1):
            try:
                response = await self.ai_extractor.complete(build_prompt(text, budget))
            except Exception as e:
                logger.warning("AI attempt %d failed: %s: %s", attempt, type(e).__name__, e)
                continue

            transactions = parse_ai_response(response, text)
            if transactions:
                return transactions
            logger.debug("AI attempt %d returned no transactions", attempt)

        return []

    async def _extract_with_heuristics(self, text: str) -> ExtractionResult:
        cancel = threading.Event()
        try:
            transactions = await asyncio.to_thread(self.segmenter.parse, text, cancel)
        except asyncio.CancelledError:
            cancel.set()
            raise
        except Exception as e:
            logger.error("Heuristic extraction failed: %s", e, exc_info=True)
            return ExtractionResult(
                outcome=ExtractionOutcome.EXTRACTION_FAILED,
                reason=str(e),
            )

        if not transactions:
            return ExtractionResult(reason="Nothing extractable in this document")

        return ExtractionResult(transactions, False, ExtractionOutcome.SUCCESS)
