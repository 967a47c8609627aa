"""
Official storm event catalog.
The 48 event types defined by the NWS Storm Data directive, in directive order.
"""

from typing import Iterable, Tuple


# Official Event Types (NWS Directive 10-1605, Table 2.1.1)
EVENT_CATALOG = [
    "Astronomical Low Tide",
    "Avalanche",
    "Blizzard",
    "Coastal Flood",
    "Cold/Wind Chill",
    "Debris Flow",
    "Dense Fog",
    "Dense Smoke",
    "Drought",
    "Dust Devil",
    "Dust Storm",
    "Excessive Heat",
    "Extreme Cold/Wind Chill",
    "Flash Flood",
    "Flood",
    "Frost/Freeze",
    "Funnel Cloud",
    "Freezing Fog",
    "Hail",
    "Heat",
    "Heavy Rain",
    "Heavy Snow",
    "High Surf",
    "High Wind",
    "Hurricane (Typhoon)",
    "Ice Storm",
    "Lake-Effect Snow",
    "Lakeshore Flood",
    "Lightning",
    "Marine Hail",
    "Marine High Wind",
    "Marine Strong Wind",
    "Marine Thunderstorm Wind",
    "Rip Current",
    "Seiche",
    "Sleet",
    "Storm Surge/Tide",
    "Strong Wind",
    "Thunderstorm Wind",
    "Tornado",
    "Tropical Depression",
    "Tropical Storm",
    "Tsunami",
    "Volcanic Ash",
    "Waterspout",
    "Wildfire",
    "Winter Storm",
    "Winter Weather",
]


class CanonicalCatalog:
    """Ordered, read-only set of canonical event labels."""

    def __init__(self, labels: Iterable[str] = EVENT_CATALOG):
        ordered = []
        seen = set()
        for label in labels:
            upper = label.upper()
            if upper not in seen:
                seen.add(upper)
                ordered.append(upper)
        self._labels: Tuple[str, ...] = tuple(ordered)
        self._lookup = frozenset(self._labels)

    def contains(self, label: str) -> bool:
        """Check whether a label is an official event type (case-insensitive)."""
        if not label:
            return False
        return label.upper() in self._lookup

    def all(self) -> Tuple[str, ...]:
        """Return catalog labels in catalog order."""
        return self._labels

    def __contains__(self, label: str) -> bool:
        return self.contains(label)

    def __iter__(self):
        return iter(self._labels)

    def __len__(self) -> int:
        return len(self._labels)


# Process-wide catalog shared by the matcher and aggregation
CANONICAL_CATALOG = CanonicalCatalog()
