"""Base classes for receipt parsers."""

from abc import ABC, abstractmethod
from typing import Optional, Any, Dict, List
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
import logging

from .lines import normalize_lines

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParseResult:
    """Result of a parsing operation with confidence and metadata."""
    value: Any
    confidence: float
    source_text: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ReceiptContext:
    """Context information about a receipt for parsing."""
    full_text: str
    lines: List[str] = None
    today: date = None
    total: Optional[Decimal] = None

    def __post_init__(self):
        # frozen dataclass: defaults are filled through object.__setattr__
        if self.full_text is None:
            object.__setattr__(self, 'full_text', '')
        if self.lines is None:
            object.__setattr__(self, 'lines', normalize_lines(self.full_text))
        if self.today is None:
            object.__setattr__(self, 'today', date.today())


class BaseParser(ABC):
    """Base class for all receipt parsers."""

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def parse(self, context: ReceiptContext) -> ParseResult:
        """
        Parse the specific field from receipt context.

        Args:
            context: Receipt context with text, lines and reference date

        Returns:
            ParseResult with value and confidence. Parsers fall back to a
            documented default value instead of failing.
        """
        pass

    def _log_result(self, result: ParseResult, context: ReceiptContext):
        """Log parsing result for debugging."""
        if result.confidence > 0:
            self.logger.info(f"Parsed: {result.value} (confidence: {result.confidence:.2f})")
        else:
            self.logger.warning(f"Parsing fell back to default: {result.value}")
