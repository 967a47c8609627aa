"""
Record types for storm event normalisation.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class ValidationError(ValueError):
    """Raised when a record or source table violates the input contract."""
    pass


class MissingColumnsError(ValidationError):
    """Raised when a source table lacks required columns."""
    pass


class MatchKind(Enum):
    """How a record's canonical label was obtained."""
    EXACT_OR_FUZZY = "exact_or_fuzzy"
    RULE_REWRITTEN = "rule_rewritten"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class RawRecord:
    """A storm event observation as supplied by ingestion."""
    timestamp: Optional[datetime]
    event_label: str
    fatalities: int = 0
    injuries: int = 0
    property_amount: float = 0.0
    property_unit_code: str = ""
    crop_amount: float = 0.0
    crop_unit_code: str = ""


@dataclass(frozen=True)
class NormalizedRecord:
    """A raw record with dollar costs and a resolved event label."""
    timestamp: Optional[datetime]
    event_label: str
    fatalities: int
    injuries: int
    property_amount: float
    property_unit_code: str
    crop_amount: float
    crop_unit_code: str
    property_cost: float
    crop_cost: float
    canonical_label: str
    match_kind: MatchKind

    @property
    def raw(self) -> RawRecord:
        """The originating raw record."""
        return RawRecord(
            timestamp=self.timestamp,
            event_label=self.event_label,
            fatalities=self.fatalities,
            injuries=self.injuries,
            property_amount=self.property_amount,
            property_unit_code=self.property_unit_code,
            crop_amount=self.crop_amount,
            crop_unit_code=self.crop_unit_code,
        )

    @property
    def is_resolved(self) -> bool:
        return self.match_kind != MatchKind.UNRESOLVED
