import pytest
from decimal import Decimal

from expense_parser.domain.enums import Currency
from expense_parser.extraction.amount import (
    CURRENCY_PATTERNS,
    AmountMatch,
    extract_amount,
    extract_bill_amount,
    find_largest_amount,
    infer_currency,
)


@pytest.mark.unit
@pytest.mark.amount
class TestCurrencyTaggedAmounts:
    """Explicit currency markers win over everything else"""

    def test_tagged_amount_beats_larger_untagged_number(self):
        # Act
        result = extract_amount("Total 500.00 Paid via UPI Rs 250")

        # Assert
        assert result == AmountMatch(Decimal("250"), Currency.INR)

    def test_grouping_separators_are_stripped(self):
        result = extract_amount("Rs.1,250.00 debited from A/c XX1234")

        assert result.amount == Decimal("1250.00")
        assert result.currency == Currency.INR

    def test_indian_digit_grouping(self):
        result = extract_amount("INR 1,00,000 credited to your account")

        assert result.amount == Decimal("100000")

    def test_rupee_symbol(self):
        result = extract_amount("₹ 349 spent on your card")

        assert result == AmountMatch(Decimal("349"), Currency.INR)

    def test_number_before_code(self):
        result = extract_amount("You paid 75.50 EUR at the museum")

        assert result == AmountMatch(Decimal("75.50"), Currency.EUR)

    @pytest.mark.parametrize("text,currency", [
        ("USD 12.99 charged at NETFLIX", Currency.USD),
        ("$45.00 at STARBUCKS", Currency.USD),
        ("Spent €30.50 in Paris", Currency.EUR),
        ("Card used for £18.20", Currency.GBP),
        ("AED 120.00 spent at Dubai Mall", Currency.AED),
        ("S$ 20.00 at hawker centre", Currency.SGD),
        ("A$ 15.00 at cafe", Currency.AUD),
        ("C$ 9.99 at Tim Hortons", Currency.CAD),
        ("¥ 1200 at Lawson", Currency.JPY),
    ])
    def test_each_supported_currency(self, text, currency):
        result = extract_amount(text)

        assert result is not None
        assert result.currency == currency

    def test_priority_order_not_reading_order(self):
        """A USD amount earlier in the text still loses to a later INR amount"""
        result = extract_amount("USD 10.00 converted, Rs 830.00 debited")

        assert result == AmountMatch(Decimal("830.00"), Currency.INR)

    def test_words_containing_rs_are_not_rupees(self):
        result = extract_amount("Thanks for shopping at Hrs Mart, paid 120.00")

        assert result.amount == Decimal("120.00")
        assert result.currency == Currency.UNKNOWN

    def test_pattern_list_is_in_priority_order(self):
        currencies = []
        for pattern in CURRENCY_PATTERNS:
            if pattern.currency not in currencies:
                currencies.append(pattern.currency)

        assert currencies == [
            Currency.INR, Currency.USD, Currency.EUR, Currency.GBP, Currency.AED,
            Currency.SGD, Currency.AUD, Currency.CAD, Currency.JPY,
        ]


@pytest.mark.unit
@pytest.mark.amount
class TestFallbackAmounts:
    """Keyword anchors, then the largest number"""

    def test_keyword_anchor_without_currency(self):
        result = extract_amount("Your a/c debited by 1,500.00 on 05/01/25")

        assert result == AmountMatch(Decimal("1500.00"), Currency.UNKNOWN)

    def test_keyword_anchor_infers_inr_from_upi(self):
        result = extract_amount("UPI txn debited 320.00 ref 998877")

        assert result == AmountMatch(Decimal("320.00"), Currency.INR)

    def test_amount_before_debited(self):
        result = extract_amount("A/c XX12 2,000.00 debited on 03-02-26")

        assert result.amount == Decimal("2000.00")

    def test_largest_number_is_last_resort(self):
        result = extract_amount("Coffee 120.00\nCake 180.50")

        assert result == AmountMatch(Decimal("180.50"), Currency.UNKNOWN)

    def test_largest_fallback_can_be_switched_off(self):
        assert extract_amount("Coffee 120.00\nCake 180.50", fallback_to_largest=False) is None

    def test_find_largest_ignores_values_up_to_one(self):
        assert find_largest_amount("Rate 0.50 discount 1.00") is None
        assert find_largest_amount("Tip 0.50 Meal 12.00") == Decimal("12.00")


@pytest.mark.unit
@pytest.mark.amount
class TestNotFound:

    @pytest.mark.parametrize("text", [
        "",
        "Your OTP is 482913",
        "Rs 0.00 debited",
        "Meeting at 10 tomorrow",
    ])
    def test_no_positive_amount(self, text):
        assert extract_amount(text) is None

    def test_zero_is_skipped_for_next_match(self):
        result = extract_amount("Rs 0 cashback, Rs 99 debited")

        assert result.amount == Decimal("99")


@pytest.mark.unit
@pytest.mark.amount
class TestInferCurrency:

    @pytest.mark.parametrize("text,currency", [
        ("Paid ₹ via app", Currency.INR),
        ("paid rs. fifty", Currency.INR),
        ("Charged in USD", Currency.USD),
        ("Card charged in GBP", Currency.GBP),
        ("Amount in dirhams", Currency.AED),
        ("Paid via PhonePe", Currency.INR),
        ("NEFT transfer", Currency.INR),
        ("CGST 9%", Currency.INR),
        ("hello world", Currency.UNKNOWN),
    ])
    def test_context_clues(self, text, currency):
        assert infer_currency(text) == currency

    def test_substrings_are_not_clues(self):
        """'europe' is not EUR, 'supi' is not UPI"""
        assert infer_currency("Trip to europe with supi") == Currency.UNKNOWN


@pytest.mark.unit
@pytest.mark.amount
class TestBillAmounts:
    """Receipts and payment screenshots"""

    def test_paid_to_with_rupee_symbol(self):
        text = "Paid to Ramesh Stores\n₹7,400\nUPI transaction ID 1234"

        result = extract_bill_amount(text)

        assert result == AmountMatch(Decimal("7400"), Currency.INR)

    def test_paid_to_without_currency_marker(self):
        text = "Paid to Ramesh Stores\n7,400\nUPI Ref 123456"

        result = extract_bill_amount(text)

        assert result == AmountMatch(Decimal("7400"), Currency.INR)

    def test_grand_total_without_currency(self):
        text = "Cafe Mocha\nLatte 180.00\nGRAND TOTAL 1,180.00\nCGST 90.00"

        result = extract_bill_amount(text)

        assert result == AmountMatch(Decimal("1180.00"), Currency.INR)

    def test_net_payable_beats_larger_number(self):
        text = "Ramesh Stores\nNet Payable: 200.00\nCash tendered 500.00"

        result = extract_bill_amount(text)

        assert result.amount == Decimal("200.00")

    def test_subtotal_is_not_a_bare_total(self):
        text = "Subtotal 400.00\nTotal 450.00"

        result = extract_bill_amount(text)

        assert result.amount == Decimal("450.00")

    def test_standalone_decimal_line(self):
        text = "Payment successful\n7400.00\nRef 99"

        result = extract_bill_amount(text)

        assert result == AmountMatch(Decimal("7400.00"), Currency.UNKNOWN)

    def test_total_with_dollar(self):
        result = extract_bill_amount("Amount due: $ 64.10")

        assert result == AmountMatch(Decimal("64.10"), Currency.USD)

    def test_nothing_found(self):
        assert extract_bill_amount("Thank you for visiting") is None
