"""
Per-Category Impact Aggregation.
Groups normalised records by canonical label and ranks categories by human and economic impact.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence
import logging

from ..config.pipeline_config import PIPELINE_CONFIG
from ..records import NormalizedRecord

# Initialize logger for this module
logger = logging.getLogger(__name__)

RANKING_METRICS = PIPELINE_CONFIG["ranking"]["metrics"]


@dataclass
class CategoryTotals:
    """Summed impact for one event category."""
    label: str
    fatalities_sum: int = 0
    injuries_sum: int = 0
    property_cost_sum: float = 0.0
    crop_cost_sum: float = 0.0
    record_count: int = 0

    @property
    def fatalities(self) -> int:
        return self.fatalities_sum

    @property
    def injuries(self) -> int:
        return self.injuries_sum

    @property
    def property_cost(self) -> float:
        return self.property_cost_sum

    @property
    def crop_cost(self) -> float:
        return self.crop_cost_sum

    @property
    def health_impact(self) -> int:
        """Fatalities plus injuries."""
        return self.fatalities_sum + self.injuries_sum

    @property
    def economic_cost(self) -> float:
        """Property plus crop damage in dollars."""
        return self.property_cost_sum + self.crop_cost_sum

    def add_record(self, record: NormalizedRecord) -> None:
        self.fatalities_sum += record.fatalities
        self.injuries_sum += record.injuries
        self.property_cost_sum += record.property_cost
        self.crop_cost_sum += record.crop_cost
        self.record_count += 1

    def add_totals(self, other: "CategoryTotals") -> None:
        self.fatalities_sum += other.fatalities_sum
        self.injuries_sum += other.injuries_sum
        self.property_cost_sum += other.property_cost_sum
        self.crop_cost_sum += other.crop_cost_sum
        self.record_count += other.record_count


@dataclass
class ImpactReport:
    """Complete aggregation result for one pipeline run."""
    totals: List[CategoryTotals] = field(default_factory=list)
    rankings: Dict[str, List[CategoryTotals]] = field(default_factory=dict)
    resolution_summary: Dict[str, int] = field(default_factory=dict)
    unresolved_labels: Dict[str, int] = field(default_factory=dict)
    record_count: int = 0
    top_n: int = 0


class Aggregator:
    """Sums impact per canonical label and computes per-metric rankings."""

    def aggregate(self, records: Iterable[NormalizedRecord]) -> List[CategoryTotals]:
        """
        Group records by canonical label and sum their impact.

        Unresolved labels form their own groups so their impact stays visible.

        Args:
            records: Normalised records

        Returns:
            One CategoryTotals per distinct label, in order of first appearance
        """
        groups: Dict[str, CategoryTotals] = {}
        for record in records:
            totals = groups.get(record.canonical_label)
            if totals is None:
                totals = CategoryTotals(label=record.canonical_label)
                groups[record.canonical_label] = totals
            totals.add_record(record)

        return list(groups.values())

    def merge(self, partials: Iterable[Sequence[CategoryTotals]]) -> List[CategoryTotals]:
        """
        Merge partial aggregates into a single set of totals.

        Groups keep the order in which they are first seen across the partials,
        so merging contiguous chunks in input order reproduces the serial result.
        """
        merged: Dict[str, CategoryTotals] = {}
        for partial in partials:
            for totals in partial:
                target = merged.get(totals.label)
                if target is None:
                    target = CategoryTotals(label=totals.label)
                    merged[totals.label] = target
                target.add_totals(totals)

        return list(merged.values())

    def aggregate_chunks(
        self,
        chunks: Sequence[Sequence[NormalizedRecord]],
        workers: Optional[int] = None
    ) -> List[CategoryTotals]:
        """
        Aggregate record chunks independently, then merge the partial sums.

        Args:
            chunks: Contiguous slices of the normalised record sequence, in order
            workers: Number of worker threads (None or 1 runs serially)
        """
        if workers and workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                partials = list(executor.map(self.aggregate, chunks))
        else:
            partials = [self.aggregate(chunk) for chunk in chunks]

        return self.merge(partials)

    def top_n(
        self,
        totals: Sequence[CategoryTotals],
        n: int,
        by: str = "fatalities"
    ) -> List[CategoryTotals]:
        """
        Return the n categories with the greatest value of a metric.

        Ties keep the order of `totals` (stable sort).

        Args:
            totals: Category totals in discovery order
            n: Number of categories to return
            by: One of RANKING_METRICS

        Returns:
            Up to n CategoryTotals, highest first
        """
        if by not in RANKING_METRICS:
            raise ValueError(f"Unknown ranking metric {by!r}; expected one of {RANKING_METRICS}")
        if n <= 0:
            return []

        ranked = sorted(totals, key=lambda t: getattr(t, by), reverse=True)
        return ranked[:n]

    def rank_all(
        self,
        totals: Sequence[CategoryTotals],
        n: int,
        metrics: Optional[Sequence[str]] = None
    ) -> Dict[str, List[CategoryTotals]]:
        """Independent top-n ranking for each metric."""
        metrics = metrics or RANKING_METRICS
        return {metric: self.top_n(totals, n, by=metric) for metric in metrics}

    def totals_to_dataframe(self, totals: Iterable[CategoryTotals]):
        """
        Convert category totals to a pandas DataFrame.

        Args:
            totals: CategoryTotals objects

        Returns:
            pandas DataFrame
        """
        import pandas as pd

        rows = []
        for item in totals:
            rows.append({
                "Event Type": item.label,
                "Records": item.record_count,
                "Fatalities": item.fatalities_sum,
                "Injuries": item.injuries_sum,
                "Health Impact": item.health_impact,
                "Property Cost": round(item.property_cost_sum, 2),
                "Crop Cost": round(item.crop_cost_sum, 2),
                "Economic Cost": round(item.economic_cost, 2),
            })

        return pd.DataFrame(rows)

    def log_totals(self, totals: Sequence[CategoryTotals], label: str = "") -> None:
        """Log category totals at debug level."""
        logger.debug("[CATEGORY TOTALS%s]", f" - {label}" if label else "")
        for item in totals:
            logger.debug(
                "  %s: %d fatalities, %d injuries, $%.2f property, $%.2f crop (%d records)",
                item.label, item.fatalities_sum, item.injuries_sum,
                item.property_cost_sum, item.crop_cost_sum, item.record_count
            )
