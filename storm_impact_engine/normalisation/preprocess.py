"""
Preprocessing utilities for event label normalisation.
"""

from typing import Optional


def normalize_label(label: Optional[str]) -> str:
    """
    Normalize an event label for matching.

    Args:
        label: Raw event label

    Returns:
        Uppercase label with surrounding whitespace removed
    """
    if not label:
        return ""
    return label.upper().strip()
