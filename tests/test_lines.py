"""Tests for line normalization."""

from receipt_engine.parsers.lines import normalize_lines


class TestNormalizeLines:
    """Test suite for normalize_lines."""

    def test_strips_and_drops_blank_lines(self):
        text = "  JOLLIBEE  \n\n\t\n123 Main St\r\nTOTAL 130.00   \n"

        assert normalize_lines(text) == ["JOLLIBEE", "123 Main St", "TOTAL 130.00"]

    def test_keeps_order_and_inner_spacing(self):
        assert normalize_lines("Burger   85.00\nFries 45.00") == ["Burger   85.00", "Fries 45.00"]

    def test_empty_input(self):
        assert normalize_lines("") == []
        assert normalize_lines("   \n \n") == []
        assert normalize_lines(None) == []
