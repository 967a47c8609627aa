"""
Normalisation Module for the Storm Impact Engine.

Turns raw storm observations into normalised records through:
- Cost normalisation (unit-code multipliers)
- Approximate matching against the official event catalog
- Ordered rule cascade for labels the matcher rejects
"""

from .engine import EventNormalizer, LabelResolution
from .preprocess import normalize_label
from .costs import multiplier, cost
from .matcher import ApproxMatcher, MAX_DISTANCE, TIE_BREAK
from .cascade import RuleCascade

__all__ = [
    # Main normaliser
    "EventNormalizer",
    "LabelResolution",
    # Preprocessing utilities
    "normalize_label",
    # Cost utilities
    "multiplier",
    "cost",
    # Label resolution
    "ApproxMatcher",
    "MAX_DISTANCE",
    "TIE_BREAK",
    "RuleCascade",
]
