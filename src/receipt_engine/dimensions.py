"""Dimension and fact mappings handed to the persistence layer."""

from dataclasses import asdict, dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional
from .models import ParsedReceipt


@dataclass(frozen=True)
class DateDimension:
    """Calendar attributes of a transaction date (date dimension row)."""
    date_id: str
    day_of_month: int
    month: int
    year: int
    day_of_week: int  # 1 = Sunday ... 7 = Saturday
    day_name: str
    month_name: str
    quarter: int
    week: int  # ISO week number
    is_weekend: bool
    is_holiday: bool = False

    @classmethod
    def from_date(cls, value: date) -> 'DateDimension':
        return cls(
            date_id=value.isoformat(),
            day_of_month=value.day,
            month=value.month,
            year=value.year,
            day_of_week=value.isoweekday() % 7 + 1,
            day_name=value.strftime('%A'),
            month_name=value.strftime('%B'),
            quarter=(value.month - 1) // 3 + 1,
            week=value.isocalendar()[1],
            is_weekend=value.weekday() >= 5,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ExpenseFact:
    """Monetary fact of one receipt, keyed by its dimension values."""
    amount: Decimal
    category_name: str
    date_id: str
    store_name: str
    description: Optional[str]
    item_count: int

    @classmethod
    def from_receipt(cls, receipt: ParsedReceipt) -> 'ExpenseFact':
        """
        Map a parsed receipt onto the fact row the persistence layer writes.

        The description lists the purchased item names, or is None when no
        items were extracted.
        """
        names = [item.name for item in receipt.items]
        return cls(
            amount=receipt.total,
            category_name=receipt.category,
            date_id=receipt.date.isoformat(),
            store_name=receipt.merchant,
            description=', '.join(names) if names else None,
            item_count=len(names),
        )
