"""
Ingest module for the Storm Impact Engine.

Loads storm database exports into RawRecords.
"""

from .loader import (
    load_storm_events,
    records_from_dataframe,
    filter_since_year,
    filter_with_impact,
    SOURCE_COLUMNS,
)

__all__ = [
    "load_storm_events",
    "records_from_dataframe",
    "filter_since_year",
    "filter_with_impact",
    "SOURCE_COLUMNS",
]
