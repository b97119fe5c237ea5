"""Line item extraction: product name followed by a trailing price."""

import re
import logging
from decimal import Decimal
from typing import Optional, List, Sequence
from .base import BaseParser, ParseResult, ReceiptContext
from .amount_parser import DEFAULT_CURRENCY_MARKERS, currency_pattern, to_amount
from ..models import LineItem

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDE_KEYWORDS = ['TOTAL', 'AMOUNT', 'SUBTOTAL', 'TAX', 'BALANCE', 'CHANGE', 'DISCOUNT']

# Items priced at or above this share of the total are the total/subtotal line
TOTAL_SHARE_LIMIT = Decimal("0.9")


class ItemParser(BaseParser):
    """Specialized parser for extracting purchased items from receipt lines."""

    def __init__(self,
                 exclude_keywords: Optional[Sequence[str]] = None,
                 currency_markers: Optional[Sequence[str]] = None):
        super().__init__()

        self.exclude_keywords = [kw.upper() for kw in (exclude_keywords or DEFAULT_EXCLUDE_KEYWORDS)]
        self.item_pattern = re.compile(
            r'^(?P<name>.+?)\s+' + currency_pattern(currency_markers or DEFAULT_CURRENCY_MARKERS) +
            r'(?P<price>\d{1,3}(?:,\d{3})+\.\d{2}|\d+\.\d{2})$',
            re.IGNORECASE
        )

    def parse(self, context: ReceiptContext) -> ParseResult:
        """
        Extract line items priced below the resolved total.

        Args:
            context: Receipt context with normalized lines and resolved total

        Returns:
            ParseResult with a list of LineItem in source order
        """
        total = context.total or Decimal("0")
        limit = total * TOTAL_SHARE_LIMIT
        items: List[LineItem] = []

        for line in context.lines:
            match = self.item_pattern.match(line)
            if not match:
                continue

            name = match.group('name').strip()
            price = to_amount(match.group('price'))
            if price is None:
                continue

            if self._is_excluded(name):
                self.logger.debug(f"Skipping summary line: {line}")
                continue

            if not (Decimal("0") < price < limit):
                self.logger.debug(f"Skipping price {price} outside (0, {limit}): {line}")
                continue

            items.append(LineItem(name=name, price=price))

        result = ParseResult(
            value=items,
            confidence=0.7 if items else 0.0,
            metadata={'count': len(items)}
        )
        self.logger.info(f"Extracted {len(items)} line items")
        return result

    def _is_excluded(self, name: str) -> bool:
        """Summary lines (totals, tax, change) are not purchased items."""
        name_upper = name.upper()
        return any(keyword in name_upper for keyword in self.exclude_keywords)
