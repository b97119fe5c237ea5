"""Receipt parsing pipeline built from the field parsers."""

import logging
from dataclasses import replace
from functools import lru_cache
from datetime import date
from pathlib import Path
from typing import Optional
from .parsers import AmountParser, DateParser, ItemParser, MerchantParser
from .parsers.base import ReceiptContext
from .classify import CategoryClassifier
from .models import ParsedReceipt

logger = logging.getLogger(__name__)

MISSING_TOTAL_WARNING = "Could not extract total amount"


class ReceiptParser:
    """
    Receipt parser composed of independent field parsers.

    The parsers hold only their pattern and keyword tables, so one instance
    can serve concurrent callers.
    """

    def __init__(self,
                 classifier: Optional[CategoryClassifier] = None,
                 rules_path: Optional[Path] = None,
                 today: Optional[date] = None):
        """
        Initialize with specialized parser components.

        Args:
            classifier: Category classifier; built from rules_path when omitted
            rules_path: Category rules YAML; the bundled rules by default
            today: Fixed reference date for date validation and fallback;
                the wall clock is read per receipt when omitted
        """
        self.merchant_parser = MerchantParser()
        self.date_parser = DateParser()
        self.amount_parser = AmountParser()
        self.item_parser = ItemParser()
        self.classifier = classifier or CategoryClassifier(rules_path)
        self.today = today

        logger.info("Initialized receipt parser with modular components")

    def parse_receipt(self, text: Optional[str], today: Optional[date] = None) -> ParsedReceipt:
        """
        Parse a complete receipt.

        Args:
            text: Raw OCR text from receipt
            today: Reference date for this receipt, overriding the parser's

        Returns:
            ParsedReceipt with best-effort fields and documented defaults
        """
        text = text or ''
        context = ReceiptContext(full_text=text, today=today or self.today or date.today())

        merchant_result = self.merchant_parser.parse(context)
        date_result = self.date_parser.parse(context)
        amount_result = self.amount_parser.parse(context)

        total = amount_result.value
        item_result = self.item_parser.parse(replace(context, total=total))

        category, category_confidence = self.classifier.classify(merchant_result.value, text)

        warning = None
        if total == 0:
            warning = MISSING_TOTAL_WARNING
            logger.warning(f"{MISSING_TOTAL_WARNING}; merchant={merchant_result.value}")

        receipt = ParsedReceipt(
            merchant=merchant_result.value,
            date=date_result.value,
            total=total,
            items=tuple(item_result.value),
            category=category,
            raw_text=text,
            warning=warning,
            metadata={
                'confidence_scores': {
                    'merchant': merchant_result.confidence,
                    'date': date_result.confidence,
                    'amount': amount_result.confidence,
                    'items': item_result.confidence,
                    'category': category_confidence,
                },
                'merchant_meta': merchant_result.metadata,
                'date_meta': date_result.metadata,
                'amount_meta': amount_result.metadata,
            }
        )

        logger.info(f"Parsed receipt: merchant={receipt.merchant}, date={receipt.date}, "
                    f"total={receipt.total}, items={len(receipt.items)}, category={receipt.category}")
        return receipt


@lru_cache(maxsize=None)
def default_classifier() -> CategoryClassifier:
    """Classifier for the bundled rules, loaded once and shared read-only."""
    return CategoryClassifier()


def parse_receipt(text: Optional[str], today: Optional[date] = None) -> ParsedReceipt:
    """Parse receipt text with the bundled category rules."""
    return ReceiptParser(classifier=default_classifier(), today=today).parse_receipt(text)
