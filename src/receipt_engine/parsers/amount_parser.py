"""Total amount parsing with labeled-total priority and a largest-amount fallback."""

import re
import logging
from decimal import Decimal, InvalidOperation
from typing import Optional, List, Sequence, Tuple
from .base import BaseParser, ParseResult, ReceiptContext

logger = logging.getLogger(__name__)

MAX_AMOUNT = Decimal("1000000")

DEFAULT_TOTAL_LABELS = [
    'GRAND TOTAL', 'TOTAL AMOUNT', 'AMOUNT DUE', 'TOTAL DUE', 'NET AMOUNT',
    'TOTAL', 'BALANCE DUE', 'BALANCE', 'AMOUNT',
]

DEFAULT_CURRENCY_MARKERS = [r'PHP', r'USD', r'Rs\.?', r'P', r'[$₱€£¥]']

AMOUNT_VALUE = r'\d{1,3}(?:,\d{3})+(?:\.\d{1,2})?|\d+(?:\.\d{1,2})?'


def currency_pattern(markers: Sequence[str]) -> str:
    """Optional currency marker group built from regex fragments."""
    return r'(?:(?:' + '|'.join(markers) + r')[ \t]*)?'


def to_amount(value: str) -> Optional[Decimal]:
    """Convert '1,234.50' to Decimal, None when it is not a number."""
    try:
        return Decimal(value.replace(',', '').strip())
    except (InvalidOperation, ValueError):
        return None


def in_amount_range(amount: Optional[Decimal]) -> bool:
    """Plausible receipt amounts: strictly between 0 and 1,000,000."""
    return amount is not None and Decimal("0") < amount < MAX_AMOUNT


class AmountParser(BaseParser):
    """Specialized parser for extracting the total amount from receipts."""

    def __init__(self,
                 total_labels: Optional[Sequence[str]] = None,
                 currency_markers: Optional[Sequence[str]] = None):
        super().__init__()

        self.total_labels = list(total_labels or DEFAULT_TOTAL_LABELS)
        self.currency_markers = list(currency_markers or DEFAULT_CURRENCY_MARKERS)

        # Longest labels first so 'GRAND TOTAL' is not read as 'TOTAL'
        labels = sorted(self.total_labels, key=len, reverse=True)
        label_alternation = '|'.join(r'[ \t]+'.join(re.escape(word) for word in label.split())
                                     for label in labels)
        currency = currency_pattern(self.currency_markers)

        # The value sits on the label's line, or alone on the next line
        separator = (
            r'(?:[ \t]*[:\-]?[ \t]*'
            r'|[ \t]*[:\-]?[ \t]*\r?\n[ \t]*(?=' + currency + r'(?:' + AMOUNT_VALUE + r')[ \t\r]*$))'
        )

        # SUBTOTAL / SUB TOTAL never count as a total label
        self.labeled_pattern = re.compile(
            r'(?<![A-Za-z])(?<!SUB )(?<!SUB-)(?P<label>' + label_alternation + r')(?![A-Za-z])'
            + separator + currency +
            r'(?P<value>' + AMOUNT_VALUE + r')',
            re.IGNORECASE | re.MULTILINE
        )

        # Any figure with exactly two decimals
        self.fallback_pattern = re.compile(
            currency + r'(?<![\d.,])(?P<value>(?:\d{1,3}(?:,\d{3})+|\d+)\.\d{2})(?!\.?\d)',
            re.IGNORECASE
        )

    def parse(self, context: ReceiptContext) -> ParseResult:
        """
        Extract total amount from receipt text.

        Args:
            context: Receipt context with full text

        Returns:
            ParseResult with a Decimal total; Decimal('0') when unresolved
        """
        result = self._find_labeled_total(context.full_text)

        if result is None:
            result = self._find_fallback_total(context.full_text)

        if result is None:
            self.logger.warning("No amount candidates found")
            result = ParseResult(
                value=Decimal("0"),
                confidence=0.0,
                metadata={'type': 'unresolved'}
            )

        self._log_result(result, context)
        return result

    def _find_labeled_total(self, text: str) -> Optional[ParseResult]:
        """Phase 1: amounts next to a total label; a TOTAL label wins outright."""
        best: Optional[Tuple[Decimal, str, str]] = None

        for match in self.labeled_pattern.finditer(text):
            amount = to_amount(match.group('value'))
            if not in_amount_range(amount):
                self.logger.debug(f"Rejected labeled amount: {match.group()}")
                continue

            label = ' '.join(match.group('label').upper().split())
            if 'TOTAL' in label:
                return ParseResult(
                    value=amount,
                    confidence=0.95,
                    source_text=match.group(),
                    metadata={'type': 'labeled', 'label': label}
                )

            if best is None or amount > best[0]:
                best = (amount, label, match.group())

        if best is None:
            return None

        amount, label, source = best
        return ParseResult(
            value=amount,
            confidence=0.8,
            source_text=source,
            metadata={'type': 'labeled', 'label': label}
        )

    def _find_fallback_total(self, text: str) -> Optional[ParseResult]:
        """Phase 2: the largest two-decimal figure anywhere in the text."""
        amounts: List[Tuple[Decimal, str]] = []
        for match in self.fallback_pattern.finditer(text):
            amount = to_amount(match.group('value'))
            if in_amount_range(amount):
                amounts.append((amount, match.group()))

        if not amounts:
            return None

        amount, source = max(amounts, key=lambda x: x[0])
        self.logger.info(f"No labeled total, using largest amount {amount} of {len(amounts)} candidates")
        return ParseResult(
            value=amount,
            confidence=0.5,
            source_text=source.strip(),
            metadata={'type': 'fallback', 'candidates': len(amounts)}
        )
