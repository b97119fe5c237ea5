"""Category classification using keyword rules."""

import yaml
import logging
from typing import Dict, List, Mapping, Optional, Tuple
from pathlib import Path
from rapidfuzz import fuzz

logger = logging.getLogger(__name__)

UNCATEGORIZED = "Uncategorized"

DEFAULT_RULES_PATH = Path(__file__).parent / "rules" / "categories.yml"


class CategoryClassifier:
    """Classify receipts into spending categories using ordered keyword rules."""

    def __init__(self,
                 rules_path: Optional[Path] = None,
                 fuzzy_threshold: Optional[int] = None,
                 categories: Optional[Mapping[str, object]] = None):
        """
        Initialize classifier with category rules.

        Args:
            rules_path: Path to a categories.yml file; the bundled rules by default
            fuzzy_threshold: Minimum rapidfuzz ratio (0-100) for fuzzy merchant
                matching when no keyword matches exactly; disabled when None
            categories: In-memory keyword table used instead of a rules file
        """
        self.rules_path = Path(rules_path) if rules_path else DEFAULT_RULES_PATH
        self.fuzzy_threshold = fuzzy_threshold
        self.categories: Dict[str, List[str]] = {}

        if categories is not None:
            self.rules_path = None
            self.categories = self._normalize_rules(categories)
            logger.info(f"Loaded {len(self.categories)} category rules from mapping")
        else:
            self.load_rules()

    @classmethod
    def from_mapping(cls, categories: Mapping[str, object],
                     fuzzy_threshold: Optional[int] = None) -> 'CategoryClassifier':
        """Build a classifier from an in-memory keyword table, keeping its order."""
        return cls(fuzzy_threshold=fuzzy_threshold, categories=categories)

    def load_rules(self):
        """Load category rules from YAML file."""
        try:
            with open(self.rules_path, 'r', encoding='utf-8') as f:
                self.categories = self._normalize_rules(yaml.safe_load(f))
            logger.info(f"Loaded {len(self.categories)} category rules from {self.rules_path}")
        except Exception as e:
            logger.error(f"Failed to load category rules: {e}")
            raise

    @staticmethod
    def _normalize_rules(raw: object) -> Dict[str, List[str]]:
        """Accept {category: {any: [...]}} or {category: [...]}, lower-casing keywords."""
        if not isinstance(raw, Mapping):
            raise ValueError("Category rules must be a mapping of category name to keywords")

        categories = {}
        for category, rules in raw.items():
            keywords = rules.get('any', []) if isinstance(rules, Mapping) else rules
            if keywords is None:
                keywords = []
            if isinstance(keywords, str) or not isinstance(keywords, (list, tuple)):
                raise ValueError(f"Keywords for category '{category}' must be a list")
            categories[str(category)] = [str(kw).lower() for kw in keywords if str(kw).strip()]
        return categories

    def classify(self, merchant: Optional[str], text: str) -> Tuple[str, float]:
        """
        Classify a receipt into a category.

        Categories are tested in rule order; the first one with a keyword in
        the merchant name or the receipt text wins.

        Args:
            merchant: Extracted merchant name
            text: Full OCR text

        Returns:
            Tuple of (category, confidence_score)
        """
        merchant_lower = (merchant or '').lower()
        text_lower = (text or '').lower()

        for category, keywords in self.categories.items():
            for keyword in keywords:
                if keyword in merchant_lower:
                    logger.info(f"Classified as '{category}' from merchant keyword '{keyword}'")
                    return category, 0.9
                if keyword in text_lower:
                    logger.info(f"Classified as '{category}' from text keyword '{keyword}'")
                    return category, 0.7

        if self.fuzzy_threshold is not None:
            fuzzy_match = self._fuzzy_match(merchant_lower)
            if fuzzy_match:
                return fuzzy_match

        logger.info(f"No category match found, defaulting to '{UNCATEGORIZED}'")
        return UNCATEGORIZED, 0.0

    def _fuzzy_match(self, merchant_lower: str) -> Optional[Tuple[str, float]]:
        """Compare merchant words with single-word keywords to absorb OCR misreads."""
        words = merchant_lower.split()
        for category, keywords in self.categories.items():
            for keyword in keywords:
                if ' ' in keyword:
                    continue
                for word in words:
                    similarity = fuzz.ratio(keyword, word)
                    if similarity >= self.fuzzy_threshold:
                        logger.info(f"Fuzzy classified as '{category}' ('{word}' ~ '{keyword}', {similarity:.0f})")
                        return category, round(similarity / 100.0 * 0.5, 2)
        return None

    def get_categories(self) -> List[str]:
        """Category names in priority order."""
        return list(self.categories)
