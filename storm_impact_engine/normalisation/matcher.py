"""
Approximate matching of event labels against the official catalog.

Uses the Optimal String Alignment distance (restricted Damerau-Levenshtein)
from rapidfuzz. A label is accepted only when its closest catalog entry is
within MAX_DISTANCE edits.
"""

import logging
from typing import Optional, Tuple

from rapidfuzz.distance import OSA

from ..config.event_catalog import CanonicalCatalog, CANONICAL_CATALOG
from ..config.pipeline_config import PIPELINE_CONFIG
from .preprocess import normalize_label

logger = logging.getLogger(__name__)

MAX_DISTANCE = PIPELINE_CONFIG["matching"]["max_distance"]
TIE_BREAK = PIPELINE_CONFIG["matching"]["tie_break"]


class ApproxMatcher:
    """Matches free-text labels to catalog entries within a bounded edit distance."""

    def __init__(
        self,
        catalog: CanonicalCatalog = CANONICAL_CATALOG,
        max_distance: int = MAX_DISTANCE
    ):
        """
        Args:
            catalog: Catalog to match against
            max_distance: Largest OSA distance accepted as a match
        """
        if max_distance < 0:
            raise ValueError(f"max_distance must be non-negative, got {max_distance}")
        self.catalog = catalog
        self.max_distance = max_distance

    def closest(self, label: str) -> Tuple[Optional[str], int]:
        """
        Find the closest catalog entry to a label.

        Ties go to the entry that comes first in catalog order. Distances above
        max_distance are reported as max_distance + 1.

        Returns:
            Tuple of (catalog_label or None, distance)
        """
        text = normalize_label(label)

        if self.catalog.contains(text):
            return text, 0

        best_label = None
        best_distance = self.max_distance + 1
        for entry in self.catalog.all():
            distance = OSA.distance(text, entry, score_cutoff=self.max_distance)
            # Strict comparison keeps the earliest entry on ties
            if distance < best_distance:
                best_label = entry
                best_distance = distance
                if distance == 0:
                    break

        return best_label, best_distance

    def match(self, label: str) -> Optional[str]:
        """
        Match a label to a catalog entry.

        Args:
            label: Raw event label (upper-cased before matching)

        Returns:
            Canonical label, or None when nothing lies within max_distance
        """
        matched, distance = self.closest(label)
        if matched is not None:
            logger.debug("Matched %r to %r at distance %d", label, matched, distance)
        return matched
