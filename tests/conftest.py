"""Shared fixtures for the receipt engine test suite."""

import sys
from datetime import date
from pathlib import Path

import pytest

# Allow running the suite from a source checkout without installing
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from receipt_engine.parsers.base import ReceiptContext  # noqa: E402

REFERENCE_DATE = date(2025, 12, 31)

JOLLIBEE_RECEIPT = "JOLLIBEE\n123 Main St\n07/20/2024\nBurger 85.00\nFries 45.00\nTOTAL 130.00"


@pytest.fixture
def reference_date():
    return REFERENCE_DATE


def make_context(text, today=REFERENCE_DATE, **kwargs):
    """Receipt context with a fixed reference date."""
    return ReceiptContext(full_text=text, today=today, **kwargs)
