"""
Label Pattern Definitions for the Storm Impact Engine.

Contains the ordered rewrite rules used to clean free-text event labels into
official event types.
"""

from .cascade_rules import CASCADE_RULES

__all__ = [
    "CASCADE_RULES",
]
