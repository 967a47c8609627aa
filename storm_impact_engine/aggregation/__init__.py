"""
Aggregation Module for the Storm Impact Engine.

Contains per-category impact totals and rankings.
"""

from .aggregator import (
    CategoryTotals,
    ImpactReport,
    Aggregator,
    RANKING_METRICS,
)

__all__ = [
    "CategoryTotals",
    "ImpactReport",
    "Aggregator",
    "RANKING_METRICS",
]
