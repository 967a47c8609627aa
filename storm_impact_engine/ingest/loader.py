"""
Storm database loader.
Reads storm event tables with pandas and converts rows into RawRecords.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pandas as pd

from ..config.pipeline_config import PIPELINE_CONFIG
from ..records import MissingColumnsError, RawRecord

logger = logging.getLogger(__name__)

INGEST_CONFIG = PIPELINE_CONFIG["ingest"]
SOURCE_COLUMNS: Dict[str, str] = INGEST_CONFIG["columns"]


def _parse_timestamps(values: pd.Series, timestamp_format: Optional[str]) -> pd.Series:
    parsed = pd.to_datetime(values, format=timestamp_format, errors="coerce")
    # Retry rows the fixed format could not read
    retry = parsed.isna() & values.notna()
    if timestamp_format and retry.any():
        parsed.loc[retry] = pd.to_datetime(values[retry], errors="coerce")
    return parsed


def _to_number(values: pd.Series) -> pd.Series:
    return pd.to_numeric(values, errors="coerce").fillna(0)


def _to_count(values: pd.Series, name: str) -> pd.Series:
    numbers = _to_number(values)
    rounded = numbers.round()
    fractional = int((numbers != rounded).sum())
    if fractional:
        logger.warning("Rounded %d fractional %s values to whole counts", fractional, name)
    return rounded.astype(int)


def _code_text(value) -> str:
    if pd.isna(value):
        return ""
    # Numeric columns with gaps arrive as floats: 5.0 is code "5"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _to_code(values: pd.Series) -> pd.Series:
    return values.map(_code_text)


def records_from_dataframe(
    df: pd.DataFrame,
    columns: Optional[Dict[str, str]] = None,
    timestamp_format: Optional[str] = None
) -> List[RawRecord]:
    """
    Convert a storm event table into RawRecords.

    Args:
        df: Source table
        columns: Mapping of RawRecord field -> source column (defaults to PIPELINE_CONFIG)
        timestamp_format: strptime format of the timestamp column

    Returns:
        One RawRecord per row, in row order

    Raises:
        MissingColumnsError: If a required column is missing
    """
    columns = columns or SOURCE_COLUMNS
    if timestamp_format is None:
        timestamp_format = INGEST_CONFIG["timestamp_format"]

    missing = [source for source in columns.values() if source not in df.columns]
    if missing:
        raise MissingColumnsError(f"Missing required columns: {', '.join(missing)}")

    timestamps = _parse_timestamps(df[columns["timestamp"]], timestamp_format)
    labels = df[columns["event_label"]].fillna("").astype(str)
    fatalities = _to_count(df[columns["fatalities"]], "fatalities")
    injuries = _to_count(df[columns["injuries"]], "injuries")
    property_amounts = _to_number(df[columns["property_amount"]]).astype(float)
    property_codes = _to_code(df[columns["property_unit_code"]])
    crop_amounts = _to_number(df[columns["crop_amount"]]).astype(float)
    crop_codes = _to_code(df[columns["crop_unit_code"]])

    records = []
    for row in zip(timestamps, labels, fatalities, injuries,
                   property_amounts, property_codes, crop_amounts, crop_codes):
        timestamp = row[0].to_pydatetime() if pd.notna(row[0]) else None
        records.append(RawRecord(
            timestamp=timestamp,
            event_label=row[1],
            fatalities=int(row[2]),
            injuries=int(row[3]),
            property_amount=float(row[4]),
            property_unit_code=row[5],
            crop_amount=float(row[6]),
            crop_unit_code=row[7],
        ))

    return records


def filter_since_year(records: Iterable[RawRecord], year: int) -> List[RawRecord]:
    """Keep records dated in or after the given year. Undated records are dropped."""
    return [r for r in records if r.timestamp is not None and r.timestamp.year >= year]


def filter_with_impact(records: Iterable[RawRecord]) -> List[RawRecord]:
    """Drop records with no fatalities, injuries or damage."""
    return [
        r for r in records
        if r.fatalities or r.injuries or r.property_amount or r.crop_amount
    ]


def load_storm_events(
    path: str,
    since_year: Optional[int] = None,
    drop_zero_impact: Optional[bool] = None,
    columns: Optional[Dict[str, str]] = None
) -> List[RawRecord]:
    """
    Load storm events from a CSV file (plain or compressed).

    Args:
        path: Path to the storm database export
        since_year: Keep only events from this year onwards (None keeps all)
        drop_zero_impact: Drop rows without casualties or damage (defaults to PIPELINE_CONFIG)
        columns: Mapping of RawRecord field -> source column

    Returns:
        List of RawRecords

    Raises:
        FileNotFoundError: If the file does not exist
        MissingColumnsError: If a required column is missing
    """
    source = Path(path)
    if not source.exists():
        raise FileNotFoundError(f"Storm data file not found: {path}")

    columns = columns or SOURCE_COLUMNS
    if drop_zero_impact is None:
        drop_zero_impact = INGEST_CONFIG["drop_zero_impact"]

    wanted = set(columns.values())
    # Read as text so unit codes like "0" or "5" are not coerced to floats
    df = pd.read_csv(source, usecols=lambda name: name in wanted, dtype=str)
    logger.info("Read %d rows from %s", len(df), source.name)

    records = records_from_dataframe(df, columns=columns)

    if since_year is not None:
        records = filter_since_year(records, since_year)
        logger.debug("%d records from %d onwards", len(records), since_year)

    if drop_zero_impact:
        records = filter_with_impact(records)
        logger.debug("%d records with recorded impact", len(records))

    return records
