"""Receipt parsing components - one parser per extracted field."""

from .lines import normalize_lines
from .merchant_parser import MerchantParser
from .date_parser import DateParser
from .amount_parser import AmountParser
from .item_parser import ItemParser

__all__ = ['normalize_lines', 'MerchantParser', 'DateParser', 'AmountParser', 'ItemParser']
