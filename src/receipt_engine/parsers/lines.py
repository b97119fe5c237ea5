"""Line normalization for raw OCR text."""

from typing import List, Optional


def normalize_lines(text: Optional[str]) -> List[str]:
    """
    Split raw OCR text into trimmed, non-empty lines.

    Args:
        text: Raw OCR text (one text block per line)

    Returns:
        Lines in source order, stripped, with blank lines removed
    """
    if not text:
        return []
    return [line.strip() for line in text.splitlines() if line.strip()]
