"""
Storm Event Normaliser.
Derives dollar costs and canonical event labels for raw storm observations.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..config.event_catalog import CanonicalCatalog, CANONICAL_CATALOG
from ..config.pipeline_config import PIPELINE_CONFIG
from ..records import MatchKind, NormalizedRecord, RawRecord, ValidationError
from .cascade import RuleCascade
from .costs import cost
from .matcher import ApproxMatcher, MAX_DISTANCE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LabelResolution:
    """Outcome of resolving one raw event label."""
    label: str
    match_kind: MatchKind
    rules_fired: Tuple[str, ...] = ()
    distance: Optional[int] = None  # OSA distance when matched, else None


class EventNormalizer:
    """Normalises raw storm records: costs first, then matcher, then rule cascade."""

    def __init__(
        self,
        catalog: CanonicalCatalog = CANONICAL_CATALOG,
        cascade: Optional[RuleCascade] = None,
        max_distance: int = MAX_DISTANCE,
        strict: bool = False
    ):
        """
        Args:
            catalog: Official event catalog
            cascade: Rewrite cascade for labels the matcher rejects
            max_distance: Matcher acceptance threshold
            strict: If True, raise ValidationError for negative counts or amounts
        """
        self.catalog = catalog
        self.matcher = ApproxMatcher(catalog=catalog, max_distance=max_distance)
        self.cascade = cascade or RuleCascade()
        self.strict = strict
        self._resolution_cache: Dict[str, LabelResolution] = {}

    def resolve_label(self, label: str) -> LabelResolution:
        """
        Resolve a raw event label to a canonical label.

        The matcher is tried first; labels it rejects go through the cascade.
        A label no rule touches keeps its upper-cased text and is UNRESOLVED.
        """
        key = label or ""
        cached = self._resolution_cache.get(key)
        if cached is not None:
            return cached

        matched, distance = self.matcher.closest(key)
        if matched is not None:
            resolution = LabelResolution(
                label=matched,
                match_kind=MatchKind.EXACT_OR_FUZZY,
                distance=distance,
            )
        else:
            rewritten, fired = self.cascade.trace(key)
            if fired:
                resolution = LabelResolution(
                    label=rewritten,
                    match_kind=MatchKind.RULE_REWRITTEN,
                    rules_fired=fired,
                )
            else:
                logger.debug("Unresolved event label %r", rewritten)
                resolution = LabelResolution(label=rewritten, match_kind=MatchKind.UNRESOLVED)

        self._resolution_cache[key] = resolution
        return resolution

    def _validate(self, record: RawRecord) -> None:
        for name in ("fatalities", "injuries", "property_amount", "crop_amount"):
            value = getattr(record, name)
            if value is not None and value < 0:
                raise ValidationError(
                    f"Negative {name} ({value}) for event {record.event_label!r}"
                )

    def normalize_record(self, record: RawRecord) -> NormalizedRecord:
        """
        Normalise a single raw record.

        Args:
            record: Raw storm observation

        Returns:
            NormalizedRecord with costs, canonical label and match kind
        """
        if self.strict:
            self._validate(record)

        resolution = self.resolve_label(record.event_label)

        return NormalizedRecord(
            timestamp=record.timestamp,
            event_label=record.event_label,
            fatalities=record.fatalities,
            injuries=record.injuries,
            property_amount=record.property_amount,
            property_unit_code=record.property_unit_code,
            crop_amount=record.crop_amount,
            crop_unit_code=record.crop_unit_code,
            property_cost=cost(record.property_amount, record.property_unit_code),
            crop_cost=cost(record.crop_amount, record.crop_unit_code),
            canonical_label=resolution.label,
            match_kind=resolution.match_kind,
        )

    def _normalize_chunk(self, chunk: Sequence[RawRecord]) -> List[NormalizedRecord]:
        return [self.normalize_record(record) for record in chunk]

    def normalize_records(
        self,
        records: Iterable[RawRecord],
        workers: Optional[int] = None,
        chunk_size: Optional[int] = None
    ) -> List[NormalizedRecord]:
        """
        Normalise a batch of raw records, preserving input order.

        Args:
            records: Raw storm observations
            workers: Number of worker threads (None or 1 runs serially)
            chunk_size: Records per work unit when running in parallel

        Returns:
            One NormalizedRecord per input record, in input order
        """
        records = list(records)

        if not workers or workers <= 1 or len(records) < 2:
            normalized = self._normalize_chunk(records)
        else:
            size = chunk_size or PIPELINE_CONFIG["processing"]["chunk_size"]
            chunks = [records[i:i + size] for i in range(0, len(records), size)]
            logger.debug("Normalising %d records in %d chunks on %d workers",
                         len(records), len(chunks), workers)
            normalized = []
            with ThreadPoolExecutor(max_workers=workers) as executor:
                # map() yields results in submission order
                for part in executor.map(self._normalize_chunk, chunks):
                    normalized.extend(part)

        unresolved = sum(1 for r in normalized if r.match_kind == MatchKind.UNRESOLVED)
        logger.info(
            "Normalised %d records (%d labels cached, %d unresolved records)",
            len(normalized), len(self._resolution_cache), unresolved
        )
        return normalized

    def get_resolution_summary(self, records: Iterable[NormalizedRecord]) -> Dict[str, int]:
        """Count normalised records per match kind."""
        summary = {kind.value: 0 for kind in MatchKind}
        for record in records:
            summary[record.match_kind.value] += 1
        return summary

    def unresolved_labels(self, records: Iterable[NormalizedRecord]) -> Dict[str, int]:
        """Count records per unresolved label, in first-seen order."""
        counts: Dict[str, int] = {}
        for record in records:
            if record.match_kind == MatchKind.UNRESOLVED:
                counts[record.canonical_label] = counts.get(record.canonical_label, 0) + 1
        return counts

    def records_to_dataframe(self, records: Iterable[NormalizedRecord]):
        """
        Convert normalised records to a pandas DataFrame.

        Args:
            records: Normalised records

        Returns:
            pandas DataFrame with one row per record
        """
        import pandas as pd

        rows = []
        for record in records:
            rows.append({
                "timestamp": record.timestamp,
                "event_label": record.event_label,
                "canonical_label": record.canonical_label,
                "match_kind": record.match_kind.value,
                "fatalities": record.fatalities,
                "injuries": record.injuries,
                "property_amount": record.property_amount,
                "property_unit_code": record.property_unit_code,
                "property_cost": record.property_cost,
                "crop_amount": record.crop_amount,
                "crop_unit_code": record.crop_unit_code,
                "crop_cost": record.crop_cost,
            })

        return pd.DataFrame(rows)
