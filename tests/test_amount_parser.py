"""Tests for AmountParser component."""

import pytest
from decimal import Decimal
from receipt_engine.parsers.amount_parser import AmountParser

from conftest import make_context


class TestAmountParser:
    """Test suite for AmountParser."""

    def setup_method(self):
        """Set up test fixtures."""
        self.parser = AmountParser()

    def test_basic_total(self):
        """Test parsing a TOTAL line."""
        result = self.parser.parse(make_context("Burger 85.00\nTOTAL 130.00"))

        assert result.value == Decimal("130.00")
        assert result.metadata['type'] == 'labeled'
        assert result.metadata['label'] == 'TOTAL'
        assert result.confidence > 0.9

    def test_total_with_currency_and_separators(self):
        """Test currency markers and thousands separators."""
        test_cases = [
            ("TOTAL: PHP 1,234.50", Decimal("1234.50")),
            ("Grand Total ₱2,500.00", Decimal("2500.00")),
            ("TOTAL $ 45.10", Decimal("45.10")),
            ("Total P 310.75", Decimal("310.75")),
            ("TOTAL 999,999.99", Decimal("999999.99")),
        ]

        for text, expected in test_cases:
            result = self.parser.parse(make_context(text))
            assert result.value == expected, f"Expected {expected}, got {result.value} for: {text}"

    def test_subtotal_is_not_a_total_label(self):
        """Test that SUBTOTAL does not win over the real TOTAL."""
        text = """
        SUBTOTAL 120.00
        SUB TOTAL 120.00
        VAT 12% 10.00
        TOTAL 130.00
        """

        result = self.parser.parse(make_context(text))

        assert result.value == Decimal("130.00")

    def test_total_label_wins_over_larger_amounts(self):
        """Test that a TOTAL label wins immediately over other labeled amounts."""
        text = """
        TOTAL 130.00
        AMOUNT 500.00
        CASH 500.00
        """

        result = self.parser.parse(make_context(text))

        assert result.value == Decimal("130.00")

    def test_first_total_label_wins(self):
        """Test that the first accepted TOTAL-labeled value is taken."""
        text = "GRAND TOTAL 250.00\nTOTAL SAVINGS 20.00"

        result = self.parser.parse(make_context(text))

        assert result.value == Decimal("250.00")
        assert result.metadata['label'] == 'GRAND TOTAL'

    def test_max_of_non_total_labels(self):
        """Test the running maximum when no label contains TOTAL."""
        text = """
        AMOUNT DUE 75.00
        BALANCE 80.50
        NET AMOUNT 70.00
        """

        result = self.parser.parse(make_context(text))

        assert result.value == Decimal("80.50")
        assert result.metadata['type'] == 'labeled'
        assert result.metadata['label'] == 'BALANCE'

    def test_out_of_range_labeled_values_are_rejected(self):
        """Test that zero and huge labeled values fall through to the next candidate."""
        text = """
        TOTAL 0.00
        TOTAL 1,000,000.00
        BALANCE 42.00
        """

        result = self.parser.parse(make_context(text))

        assert result.value == Decimal("42.00")

    def test_fallback_largest_two_decimal_amount(self):
        """Test the fallback when no label is present."""
        text = """
        Coffee 45.00
        Muffin 12.50
        CASH 97.00
        """

        result = self.parser.parse(make_context(text))

        assert result.value == Decimal("97.00")
        assert result.metadata['type'] == 'fallback'
        assert result.metadata['candidates'] == 3

    def test_fallback_ignores_non_money_numbers(self):
        """Test that integers, times and dotted dates are not fallback candidates."""
        text = """
        Store 1234
        20.07.2024 10:45
        Tea 35.00
        """

        result = self.parser.parse(make_context(text))

        assert result.value == Decimal("35.00")

    def test_fallback_respects_range(self):
        """Test that values of a million or more are never a total."""
        result = self.parser.parse(make_context("REF 1,500,000.00\nTea 35.00"))

        assert result.value == Decimal("35.00")

    def test_unresolved_total(self):
        """Test that no amount yields zero."""
        result = self.parser.parse(make_context("THANK YOU\nCOME AGAIN"))

        assert result.value == Decimal("0")
        assert result.confidence == 0.0
        assert result.metadata['type'] == 'unresolved'

    def test_custom_labels(self):
        """Test a non-English label table."""
        parser = AmountParser(total_labels=['GESAMTSUMME', 'SUMME'], currency_markers=['EUR', '€'])

        result = parser.parse(make_context("Brot 3.50\nSUMME EUR 12.40"))

        assert result.value == Decimal("12.40")
        assert result.metadata['label'] == 'SUMME'

    @pytest.mark.parametrize("text", ["", "   ", "TOTAL", "TOTAL abc", "TOTAL -5.00"])
    def test_malformed_input_never_raises(self, text):
        """Test graceful degradation on malformed input."""
        result = self.parser.parse(make_context(text))

        assert Decimal("0") <= result.value < Decimal("1000000")

    def test_column_header_does_not_pair_with_next_line(self):
        """Test that a TOTAL column header ignores the item row beneath it."""
        text = "JOLLIBEE\nQTY ITEM TOTAL\n1 Burger 85.00\n1 Fries 45.00\nTOTAL 130.00"

        result = self.parser.parse(make_context(text))

        assert result.value == Decimal("130.00")
        assert result.metadata['label'] == 'TOTAL'

    def test_value_on_its_own_next_line(self):
        """Test a total whose value was read as a separate OCR block."""
        test_cases = [
            ("Burger 85.00\nTOTAL\n130.00", Decimal("130.00")),
            ("Burger 85.00\nTOTAL:\r\n  PHP 1,130.00  \nCASH 2,000.00", Decimal("1130.00")),
        ]

        for text, expected in test_cases:
            result = self.parser.parse(make_context(text))
            assert result.value == expected, f"Expected {expected}, got {result.value} for: {text!r}"
            assert result.metadata['type'] == 'labeled'
