"""Structured receipt records produced by the parsing pipeline."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

TWO_PLACES = Decimal("0.01")


def format_amount(amount: Decimal) -> str:
    """Render money with two decimal places, e.g. Decimal('130') -> '130.00'."""
    return str(amount.quantize(TWO_PLACES))


@dataclass(frozen=True)
class LineItem:
    """A purchased item with its printed price."""
    name: str
    price: Decimal

    def to_dict(self) -> Dict[str, str]:
        return {'name': self.name, 'price': format_amount(self.price)}


@dataclass(frozen=True)
class ParsedReceipt:
    """Receipt fields extracted from OCR text. Immutable once built."""
    merchant: str
    date: date
    total: Decimal
    items: Tuple[LineItem, ...]
    category: str
    raw_text: str
    warning: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def total_resolved(self) -> bool:
        return self.total > 0

    def to_dict(self) -> Dict[str, Any]:
        """
        JSON-safe representation of the receipt.

        Dates are ISO 8601 strings and money values are two-place decimal
        strings so no precision is lost in transit.
        """
        result = {
            'merchant': self.merchant,
            'date': self.date.isoformat(),
            'total': format_amount(self.total),
            'items': [item.to_dict() for item in self.items],
            'category': self.category,
            'rawText': self.raw_text,
        }
        if self.warning:
            result['warning'] = self.warning
        return result
