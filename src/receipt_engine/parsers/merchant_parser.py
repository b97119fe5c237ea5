"""Merchant/store name extraction from receipt headers."""

import re
import logging
from typing import List
from .base import BaseParser, ParseResult, ReceiptContext

logger = logging.getLogger(__name__)

UNKNOWN_MERCHANT = "Unknown Merchant"


class MerchantParser(BaseParser):
    """Specialized parser for extracting the store name from the receipt header."""

    def __init__(self, max_header_lines: int = 5, max_name_lines: int = 2, max_length: int = 100):
        super().__init__()

        self.max_header_lines = max_header_lines
        self.max_name_lines = max_name_lines
        self.max_length = max_length

        # Header lines that are not business names
        self.exclude_patterns = [
            r'^[\d\s]+$',                         # Pure numbers (phone, TIN, store no.)
            r'\d{1,2}[-/]\d{1,2}[-/]\d{2,4}',     # Short numeric dates
        ]

    def parse(self, context: ReceiptContext) -> ParseResult:
        """
        Extract merchant name from the first lines of the receipt.

        Args:
            context: Receipt context with normalized lines

        Returns:
            ParseResult with merchant name, or the placeholder name
        """
        candidates = self._find_header_candidates(context.lines)

        if not candidates:
            result = ParseResult(
                value=UNKNOWN_MERCHANT,
                confidence=0.0,
                metadata={'type': 'default'}
            )
        else:
            name = ' '.join(candidates)[:self.max_length]
            result = ParseResult(
                value=name,
                confidence=max(0.3, 0.7 - (len(candidates) - 1) * 0.1),
                source_text=candidates[0][:50],
                metadata={'type': 'header', 'line_count': len(candidates)}
            )

        self._log_result(result, context)
        return result

    def _find_header_candidates(self, lines: List[str]) -> List[str]:
        """Collect qualifying header lines, earliest first."""
        candidates = []
        for line in lines[:self.max_header_lines]:
            line = line.strip()
            if len(line) <= 3:
                continue
            if any(re.search(pattern, line) for pattern in self.exclude_patterns):
                self.logger.debug(f"Skipping header line: {line}")
                continue

            candidates.append(line)
            if len(candidates) >= self.max_name_lines:
                break
        return candidates
