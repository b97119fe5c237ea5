"""Date parsing with numeric and textual-month receipt date formats."""

import re
import logging
from typing import Optional, Callable, List, Tuple
from datetime import date
from dateutil.parser import parse as date_parse
from .base import BaseParser, ParseResult, ReceiptContext

logger = logging.getLogger(__name__)

MONTH_NAME = (r'(Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|June?|July?|'
              r'Aug(?:ust)?|Sep(?:t|tember)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)\.?')


def expand_two_digit_year(year: int) -> int:
    """Pivot a two-digit year: 00-49 -> 2000s, 50-99 -> 1900s."""
    return 2000 + year if year < 50 else 1900 + year


def _numeric_month_first(groups: Tuple[str, ...]) -> date:
    first, second, year = (int(g) for g in groups)
    try:
        return date(year, first, second)
    except ValueError:
        return date(year, second, first)


def _numeric_iso(groups: Tuple[str, ...]) -> date:
    year, month, day = (int(g) for g in groups)
    return date(year, month, day)


def _numeric_day_first_short(groups: Tuple[str, ...]) -> date:
    first, second, year = (int(g) for g in groups)
    year = expand_two_digit_year(year)
    try:
        return date(year, second, first)
    except ValueError:
        return date(year, first, second)


def _textual(day: str, month: str, year: int) -> date:
    return date_parse(f"{int(day)} {month} {year}").date()


def _day_month_year(groups: Tuple[str, ...]) -> date:
    day, month, year = groups
    return _textual(day, month, int(year))


def _month_day_year(groups: Tuple[str, ...]) -> date:
    month, day, year = groups
    return _textual(day, month, int(year))


def _month_day_short(groups: Tuple[str, ...]) -> date:
    month, day, year = groups
    return _textual(day, month, expand_two_digit_year(int(year)))


class DateParser(BaseParser):
    """Specialized parser for extracting the transaction date from receipts."""

    def __init__(self):
        super().__init__()

        # Date patterns in priority order: (pattern, pattern_type, builder)
        patterns = [
            (r'(?<!\d)(\d{1,2})[-/](\d{1,2})[-/](\d{4})(?!\d)', 'numeric_full', _numeric_month_first),  # MM/DD/YYYY, DD/MM/YYYY
            (r'(?<!\d)(\d{4})[-/](\d{1,2})[-/](\d{1,2})(?!\d)', 'iso', _numeric_iso),                   # YYYY-MM-DD
            (r'(?<!\d)(\d{1,2})\s+' + MONTH_NAME + r',?\s+(\d{4})(?!\d)', 'day_month_year', _day_month_year),  # 20 Jul 2024
            (r'\b' + MONTH_NAME + r'\s+(\d{1,2}),?\s+(\d{4})(?!\d)', 'month_day_year', _month_day_year),       # Jul 20, 2024
            (r'(?<!\d)(\d{1,2})[-/](\d{1,2})[-/](\d{2})(?!\d)', 'numeric_short', _numeric_day_first_short),     # DD/MM/YY
            (r'\b' + MONTH_NAME + r'\s+(\d{1,2}),?\s+(\d{2})(?!\d)', 'month_day_short', _month_day_short),     # JUL 20, 25
        ]
        self.date_patterns: List[Tuple[re.Pattern, str, Callable[[Tuple[str, ...]], date]]] = [
            (re.compile(pattern, re.IGNORECASE), pattern_type, builder)
            for pattern, pattern_type, builder in patterns
        ]

    def parse(self, context: ReceiptContext) -> ParseResult:
        """
        Extract and normalize the transaction date from receipt text.

        Patterns are tried in priority order; the first pattern with a match
        that forms a valid date wins.

        Args:
            context: Receipt context with full text and reference date

        Returns:
            ParseResult with a datetime.date, or the reference date when no
            pattern yields a valid date
        """
        for rank, (pattern, pattern_type, builder) in enumerate(self.date_patterns):
            for match in pattern.finditer(context.full_text):
                parsed = self._build_date(match, builder)
                if parsed is None or not self._validate_date(parsed, context.today):
                    self.logger.debug(f"Rejected date candidate: {match.group()}")
                    continue

                result = ParseResult(
                    value=parsed,
                    confidence=round(0.95 - rank * 0.1, 2),
                    source_text=match.group(),
                    metadata={'pattern_type': pattern_type, 'original_match': match.group()}
                )
                self._log_result(result, context)
                return result

        result = ParseResult(
            value=context.today,
            confidence=0.0,
            metadata={'pattern_type': 'default'}
        )
        self._log_result(result, context)
        return result

    def _build_date(self, match, builder) -> Optional[date]:
        """Turn a regex match into a calendar date, None if it is not a real date."""
        try:
            return builder(match.groups())
        except (ValueError, OverflowError):
            return None

    def _validate_date(self, parsed: date, today: date) -> bool:
        """Accept only years after 2000 and not beyond the reference year."""
        return 2000 < parsed.year <= today.year
