"""Receipt Engine - Extract structured receipt data from OCR text."""

__version__ = "1.0.0"
__author__ = "Receipt Engine Team"
__email__ = ""

from .models import ParsedReceipt, LineItem
from .parse import ReceiptParser, parse_receipt
from .classify import CategoryClassifier
from .dimensions import DateDimension, ExpenseFact

__all__ = [
    'ParsedReceipt',
    'LineItem',
    'ReceiptParser',
    'parse_receipt',
    'CategoryClassifier',
    'DateDimension',
    'ExpenseFact',
]
