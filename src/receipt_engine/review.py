"""Review queue for receipts whose extraction fell back to defaults."""

import logging
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from pathlib import Path

from .classify import UNCATEGORIZED
from .models import ParsedReceipt
from .parsers.merchant_parser import UNKNOWN_MERCHANT

logger = logging.getLogger(__name__)

SNIPPET_LENGTH = 200


@dataclass
class ReviewItem:
    """Represents a receipt that needs manual review."""
    file_path: str
    reason: str
    suggested_merchant: Optional[str] = None
    suggested_date: Optional[date] = None
    suggested_amount: Optional[Decimal] = None
    suggested_category: Optional[str] = None
    raw_snippet: str = ""
    confidence_scores: Dict[str, float] = field(default_factory=dict)


def make_snippet(raw_text: str, length: int = SNIPPET_LENGTH) -> str:
    """Single-line excerpt of the OCR text, safe for spreadsheet cells."""
    snippet = ' '.join(raw_text.split())[:length]
    snippet = ''.join(char for char in snippet if ord(char) >= 32)
    if len(raw_text) > length:
        snippet += "..."
    return snippet


class ReviewQueue:
    """Manages receipts that need manual review."""

    def __init__(self):
        self.items: List[ReviewItem] = []

    def review_reasons(self, receipt: ParsedReceipt) -> List[str]:
        """
        List why a parsed receipt should be checked by hand.

        Args:
            receipt: Parsed receipt

        Returns:
            Reasons in a stable order; empty when the receipt looks complete
        """
        reasons = []
        if receipt.warning:
            reasons.append("missing amount")

        date_meta = receipt.metadata.get('date_meta', {})
        if date_meta.get('pattern_type') == 'default':
            reasons.append("missing date")

        if receipt.merchant == UNKNOWN_MERCHANT:
            reasons.append("unknown merchant")

        if receipt.category == UNCATEGORIZED:
            reasons.append("unknown category")

        return reasons

    def add_item(self,
                 file_path: str,
                 reason: str,
                 raw_snippet: str = "",
                 **suggestions: Any):
        """Add an item to the review queue."""
        item = ReviewItem(file_path=file_path, reason=reason, raw_snippet=raw_snippet, **suggestions)
        self.items.append(item)
        logger.debug(f"Added to review queue: {Path(file_path).name} - {reason}")

    def add_from_receipt(self, file_path: str, receipt: ParsedReceipt) -> bool:
        """
        Add a parsed receipt to review if any field fell back to a default.

        Args:
            file_path: Path to the processed OCR file
            receipt: Parsed receipt

        Returns:
            True if the receipt was queued
        """
        reasons = self.review_reasons(receipt)
        if not reasons:
            return False

        reason = "; ".join(reasons)
        logger.info(f"Sending {Path(file_path).name} to review: {reason}")

        self.add_item(
            file_path=file_path,
            reason=reason,
            raw_snippet=make_snippet(receipt.raw_text),
            suggested_merchant=receipt.merchant,
            suggested_date=receipt.date,
            suggested_amount=receipt.total if receipt.total_resolved else None,
            suggested_category=receipt.category,
            confidence_scores=dict(receipt.metadata.get('confidence_scores', {})),
        )
        return True

    def get_summary(self) -> Dict[str, Any]:
        """Get summary statistics for the review queue."""
        if not self.items:
            return {"total": 0}

        reason_counts: Dict[str, int] = {}
        for item in self.items:
            for reason in item.reason.split(';'):
                reason = reason.strip()
                reason_counts[reason] = reason_counts.get(reason, 0) + 1

        return {
            "total": len(self.items),
            "missing_data": sum(1 for item in self.items if 'missing' in item.reason),
            "reason_breakdown": reason_counts
        }

    def clear(self):
        """Clear all items from the review queue."""
        self.items.clear()
