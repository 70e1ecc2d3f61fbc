import pytest

from expense_parser.categorization.categories import (
    CATEGORIES,
    OTHER,
    VOICE_ALIASES,
    coerce_category,
    coerce_voice_category,
    is_valid,
)


@pytest.mark.unit
class TestCategoryVocabulary:

    @pytest.mark.parametrize("value,expected", [
        ("Groceries", "Groceries"),
        ("food & dining", "Food & Dining"),
        ("  SHOPPING ", "Shopping"),
        ("Crypto", OTHER),
        ("", OTHER),
        (None, OTHER),
    ])
    def test_coerce_category(self, value, expected):
        assert coerce_category(value) == expected

    def test_every_coerced_value_is_in_vocabulary(self):
        for value in ["x", "Food", "taxes", "UPI / Petty Cash"]:
            assert is_valid(coerce_category(value))

    def test_other_is_part_of_vocabulary(self):
        assert OTHER in CATEGORIES


@pytest.mark.unit
class TestVoiceAliases:

    @pytest.mark.parametrize("alias,expected", [
        ("food", "Food & Dining"),
        ("EMI", "Debt & EMI"),
        ("housing", "Housing & Rent"),
        ("upi", "UPI / Petty Cash"),
    ])
    def test_alias_expands(self, alias, expected):
        assert coerce_voice_category(alias) == expected

    def test_full_name_passes_through(self):
        assert coerce_voice_category("Pet Care") == "Pet Care"

    def test_unknown_alias_is_other(self):
        assert coerce_voice_category("yacht") == OTHER

    def test_aliases_point_into_vocabulary(self):
        assert all(is_valid(name) for name in VOICE_ALIASES.values())
