"""
Closed category vocabulary.

Every category that leaves the engine is a member of CATEGORIES.
Anything else is coerced to OTHER.
"""
from typing import Dict, List, Optional

OTHER = "Other"
UNKNOWN_MERCHANT = "Unknown"

CATEGORIES: List[str] = [
    "Housing & Rent",
    "Utilities",
    "Groceries",
    "Food & Dining",
    "Transport & Fuel",
    "Shopping",
    "Medical & Healthcare",
    "Entertainment",
    "Subscriptions",
    "Bills & Recharge",
    "Insurance",
    "Debt & EMI",
    "Investments",
    "Education & Learning",
    "Business Operations",
    "Marketing & Ads",
    "Inventory & Supplies",
    "Professional Fees",
    "Travel & Vacation",
    "Taxes",
    "Gifts & Donations",
    "Family & Dependents",
    "Pet Care",
    "Vehicle Maintenance",
    "Banking & Fees",
    "UPI / Petty Cash",
    # Short labels used by the default biller seed
    "Banking",
    "Food",
    "Transport",
    "UPI",
    "Bills",
    "Medical",
    OTHER,
]

# Short ids a voice assistant sends instead of the full name
VOICE_ALIASES: Dict[str, str] = {
    "housing": "Housing & Rent",
    "utilities": "Utilities",
    "groceries": "Groceries",
    "food": "Food & Dining",
    "transport": "Transport & Fuel",
    "shopping": "Shopping",
    "medical": "Medical & Healthcare",
    "entertainment": "Entertainment",
    "subscriptions": "Subscriptions",
    "bills": "Bills & Recharge",
    "insurance": "Insurance",
    "emi": "Debt & EMI",
    "investments": "Investments",
    "education": "Education & Learning",
    "business": "Business Operations",
    "travel": "Travel & Vacation",
    "taxes": "Taxes",
    "gifts": "Gifts & Donations",
    "family": "Family & Dependents",
    "pet": "Pet Care",
    "vehicle": "Vehicle Maintenance",
    "banking": "Banking & Fees",
    "upi": "UPI / Petty Cash",
    "other": OTHER,
}

_BY_LOWER = {name.lower(): name for name in CATEGORIES}


def is_valid(category: Optional[str]) -> bool:
    return category in CATEGORIES


def coerce_category(category: Optional[str]) -> str:
    """
    Map any category string onto the vocabulary.

    Exact members are returned as-is, case variants are normalized to the
    canonical spelling, and anything unknown becomes "Other".

    Example:
        >>> coerce_category("food & dining")
        'Food & Dining'
        >>> coerce_category("Crypto")
        'Other'
    """
    if not category:
        return OTHER

    if category in CATEGORIES:
        return category

    return _BY_LOWER.get(category.strip().lower(), OTHER)


def coerce_voice_category(category: Optional[str]) -> str:
    """Like coerce_category, but voice alias ids expand to full names first"""
    if category and category.strip().lower() in VOICE_ALIASES:
        return VOICE_ALIASES[category.strip().lower()]
    return coerce_category(category)
