"""
Configuration module for the Storm Impact Engine.

This module contains the event catalog, unit-code table and pipeline settings.
"""

from .event_catalog import EVENT_CATALOG, CanonicalCatalog, CANONICAL_CATALOG
from .cost_config import LETTER_MULTIPLIERS, DIGIT_CODES, DEFAULT_MULTIPLIER
from .pipeline_config import PIPELINE_CONFIG

__all__ = [
    "EVENT_CATALOG",
    "CanonicalCatalog",
    "CANONICAL_CATALOG",
    "LETTER_MULTIPLIERS",
    "DIGIT_CODES",
    "DEFAULT_MULTIPLIER",
    "PIPELINE_CONFIG",
]
