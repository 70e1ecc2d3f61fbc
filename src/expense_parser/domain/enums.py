from enum import Enum

class Currency(Enum):
    """Currency detected in a piece of financial text"""
    INR = "INR"
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    AED = "AED"
    SGD = "SGD"
    AUD = "AUD"
    CAD = "CAD"
    JPY = "JPY"
    UNKNOWN = "Unknown"

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]


_SYMBOLS = {
    Currency.INR: "₹",
    Currency.USD: "$",
    Currency.EUR: "€",
    Currency.GBP: "£",
    Currency.AED: "AED",
    Currency.SGD: "S$",
    Currency.AUD: "A$",
    Currency.CAD: "C$",
    Currency.JPY: "¥",
    Currency.UNKNOWN: "?",
}


class AICapabilityStatus(Enum):
    """Whether an AI-assisted extractor can be used"""
    UNAVAILABLE = "Unavailable" # no capability plugged in
    DISABLED = "Disabled" # present but switched off by the user
    ENABLED = "Enabled"


class ExtractionOutcome(Enum):
    """Outcome of extracting transactions from a document"""
    SUCCESS = "Success"
    NO_TRANSACTIONS_FOUND = "No transactions found"
    EXTRACTION_FAILED = "Extraction failed"


class StatementType(Enum):
    """Kind of statement a document was imported as"""
    BANK = "bank"
    CREDIT_CARD = "credit-card"
