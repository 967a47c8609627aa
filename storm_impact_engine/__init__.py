"""
Storm Impact Engine - Storm event cleaning and impact ranking.

Maps free-text storm event labels onto the official NWS event catalog, converts
damage figures to dollars and ranks event types by human and economic impact.

Main Components:
    - config: Event catalog, unit-code table and pipeline settings
    - patterns: Ordered label rewrite rules
    - normalisation: Cost normalisation, approximate matching and rule cascade
    - aggregation: Per-category totals and rankings
    - ingest: Loading storm database exports
"""

from typing import Iterable, Optional

from .records import (
    RawRecord,
    NormalizedRecord,
    MatchKind,
    ValidationError,
    MissingColumnsError,
)

# Configuration
from .config import (
    EVENT_CATALOG,
    CanonicalCatalog,
    CANONICAL_CATALOG,
    PIPELINE_CONFIG,
)

from .patterns import CASCADE_RULES

# Normalisation components
from .normalisation import (
    EventNormalizer,
    LabelResolution,
    ApproxMatcher,
    RuleCascade,
    multiplier,
    cost,
    MAX_DISTANCE,
    TIE_BREAK,
)

# Aggregation components
from .aggregation import (
    Aggregator,
    CategoryTotals,
    ImpactReport,
    RANKING_METRICS,
)

from .ingest import load_storm_events, records_from_dataframe


__version__ = "1.0.0"
__all__ = [
    # Records
    "RawRecord",
    "NormalizedRecord",
    "MatchKind",
    "ValidationError",
    "MissingColumnsError",
    # Configuration
    "EVENT_CATALOG",
    "CanonicalCatalog",
    "CANONICAL_CATALOG",
    "PIPELINE_CONFIG",
    "CASCADE_RULES",
    # Normalisation
    "EventNormalizer",
    "LabelResolution",
    "ApproxMatcher",
    "RuleCascade",
    "multiplier",
    "cost",
    "MAX_DISTANCE",
    "TIE_BREAK",
    # Aggregation
    "Aggregator",
    "CategoryTotals",
    "ImpactReport",
    "RANKING_METRICS",
    # Ingest
    "load_storm_events",
    "records_from_dataframe",
    # Main function
    "run_storm_impact_analysis",
]


def run_storm_impact_analysis(
    records: Iterable[RawRecord],
    top_n: Optional[int] = None,
    workers: Optional[int] = None,
    strict: bool = False,
    normalizer: Optional[EventNormalizer] = None,
) -> ImpactReport:
    """
    Main entry point for storm impact analysis.

    This function orchestrates the complete pipeline:
    1. Derive dollar costs and canonical labels for every record
    2. Sum impact per canonical label
    3. Rank categories independently for each impact metric

    Args:
        records: Raw storm observations
        top_n: Number of categories per ranking (defaults to PIPELINE_CONFIG)
        workers: Worker threads for normalisation and aggregation (None runs serially)
        strict: Raise ValidationError for negative counts or amounts
        normalizer: Pre-built normaliser to reuse (its label cache carries over)

    Returns:
        ImpactReport with totals, per-metric rankings and a match-kind summary

    Example:
        >>> records = [
        ...     RawRecord(timestamp=None, event_label="TSTM WIND", fatalities=1,
        ...               property_amount=2.5, property_unit_code="K"),
        ...     RawRecord(timestamp=None, event_label="Tornado", injuries=3),
        ... ]
        >>> report = run_storm_impact_analysis(records, top_n=1)
        >>> report.rankings["fatalities"][0].label
        'STRONG WIND'
    """
    if top_n is None:
        top_n = PIPELINE_CONFIG["ranking"]["default_top_n"]

    normalizer = normalizer or EventNormalizer(strict=strict)
    aggregator = Aggregator()

    # Step 1: Normalise records
    normalized = normalizer.normalize_records(records, workers=workers)

    # Step 2: Aggregate, merging partial sums when running in parallel
    if workers and workers > 1:
        size = PIPELINE_CONFIG["processing"]["chunk_size"]
        chunks = [normalized[i:i + size] for i in range(0, len(normalized), size)]
        totals = aggregator.aggregate_chunks(chunks, workers=workers)
    else:
        totals = aggregator.aggregate(normalized)
    aggregator.log_totals(totals)

    # Step 3: Rank
    rankings = aggregator.rank_all(totals, top_n)

    return ImpactReport(
        totals=totals,
        rankings=rankings,
        resolution_summary=normalizer.get_resolution_summary(normalized),
        unresolved_labels=normalizer.unresolved_labels(normalized),
        record_count=len(normalized),
        top_n=top_n,
    )
