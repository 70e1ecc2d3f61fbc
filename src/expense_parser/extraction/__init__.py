"""
Transaction extraction from raw financial text.

Quick Start:
    >>> from expense_parser.domain.models import MappingSnapshot
    >>> from expense_parser.extraction import MessageParser
    >>>
    >>> parser = MessageParser(MappingSnapshot.from_dict({"SWIGGY": "Food"}))
    >>> txn = parser.parse("Rs.1,250.00 debited from A/c XX1234 on 05-01-25 for SWIGGY order")
    >>> print(txn)
"""
from expense_parser.extraction.amount import AmountMatch, extract_amount, extract_bill_amount
from expense_parser.extraction.dates import DateExtractor
from expense_parser.extraction.message import MessageBatch, MessageParser, split_messages
from expense_parser.extraction.segmenter import StatementSegmenter
from expense_parser.extraction.ai import (
    AICapabilityError,
    AIExtractor,
    ContextWindowExceededError,
    build_prompt,
    parse_ai_response
)
from expense_parser.extraction.selector import ExtractionResult, ExtractionStrategySelector

__all__ = [
    "AmountMatch",
    "extract_amount",
    "extract_bill_amount",
    "DateExtractor",
    "MessageBatch",
    "MessageParser",
    "split_messages",
    "StatementSegmenter",
    "AICapabilityError",
    "AIExtractor",
    "ContextWindowExceededError",
    "build_prompt",
    "parse_ai_response",
    "ExtractionResult",
    "ExtractionStrategySelector",
]
