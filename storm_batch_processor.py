"""
Storm Batch Processor for processing multiple storm database exports.
Handles plain and compressed CSV files with per-file error handling.
"""

import logging
import os
import sys
import traceback
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pandas as pd

from storm_impact_engine.aggregation.aggregator import Aggregator, CategoryTotals, ImpactReport
from storm_impact_engine.config.pipeline_config import PIPELINE_CONFIG
from storm_impact_engine.ingest.loader import load_storm_events
from storm_impact_engine.normalisation.engine import EventNormalizer
from storm_impact_engine.records import MatchKind, MissingColumnsError, ValidationError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@dataclass
class ProcessingError:
    """Details of a processing error."""
    file_name: str
    error_type: str
    error_message: str
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())


@dataclass
class FileResult:
    """Normalisation result for one source file."""
    file_name: str
    record_count: int = 0
    unresolved_count: int = 0
    totals: List[CategoryTotals] = field(default_factory=list)
    resolution_summary: Dict[str, int] = field(default_factory=dict)
    unresolved_labels: Dict[str, int] = field(default_factory=dict)


@dataclass
class BatchStats:
    """Statistics for batch processing."""
    total_files: int = 0
    processed: int = 0
    successful: int = 0
    failed: int = 0

    # Record counts
    total_records: int = 0
    unresolved_records: int = 0

    # Timing
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @property
    def processing_time(self) -> float:
        """Calculate total processing time in seconds."""
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return 0.0

    @property
    def success_rate(self) -> float:
        """Calculate success rate as percentage."""
        if self.total_files == 0:
            return 0.0
        return (self.successful / self.total_files) * 100

    @property
    def resolved_rate(self) -> float:
        """Share of records whose label reached the catalog, as percentage."""
        if self.total_records == 0:
            return 0.0
        return ((self.total_records - self.unresolved_records) / self.total_records) * 100


@dataclass
class BatchResult:
    """Complete result of batch processing."""
    stats: BatchStats
    results: List[FileResult]
    errors: List[ProcessingError]
    error_summary: Dict[str, int] = field(default_factory=dict)

    @property
    def totals(self) -> List[CategoryTotals]:
        """Category totals across all successful files, in first-seen order."""
        return Aggregator().merge(result.totals for result in self.results)

    def build_report(self, top_n: Optional[int] = None) -> ImpactReport:
        """Rank the combined totals of every successful file."""
        if top_n is None:
            top_n = PIPELINE_CONFIG["ranking"]["default_top_n"]

        aggregator = Aggregator()
        totals = self.totals

        resolution_summary = {kind.value: 0 for kind in MatchKind}
        for result in self.results:
            for kind, count in result.resolution_summary.items():
                resolution_summary[kind] = resolution_summary.get(kind, 0) + count

        unresolved_labels: Dict[str, int] = {}
        for result in self.results:
            for label, count in result.unresolved_labels.items():
                unresolved_labels[label] = unresolved_labels.get(label, 0) + count

        return ImpactReport(
            totals=totals,
            rankings=aggregator.rank_all(totals, top_n),
            resolution_summary=resolution_summary,
            unresolved_labels=unresolved_labels,
            record_count=self.stats.total_records,
            top_n=top_n,
        )

    @staticmethod
    def merge_results(result1: 'BatchResult', result2: 'BatchResult') -> 'BatchResult':
        """
        Merge two BatchResult objects into a single combined result.

        Args:
            result1: First batch result (typically the existing cumulative result)
            result2: Second batch result (typically the new batch to add)

        Returns:
            New BatchResult with merged data
        """
        merged_stats = BatchStats()

        # Sum all count fields
        merged_stats.total_files = result1.stats.total_files + result2.stats.total_files
        merged_stats.processed = result1.stats.processed + result2.stats.processed
        merged_stats.successful = result1.stats.successful + result2.stats.successful
        merged_stats.failed = result1.stats.failed + result2.stats.failed
        merged_stats.total_records = result1.stats.total_records + result2.stats.total_records
        merged_stats.unresolved_records = (
            result1.stats.unresolved_records + result2.stats.unresolved_records
        )

        # Use earliest start time and latest end time
        if result1.stats.start_time and result2.stats.start_time:
            merged_stats.start_time = min(result1.stats.start_time, result2.stats.start_time)
        else:
            merged_stats.start_time = result1.stats.start_time or result2.stats.start_time

        if result1.stats.end_time and result2.stats.end_time:
            merged_stats.end_time = max(result1.stats.end_time, result2.stats.end_time)
        else:
            merged_stats.end_time = result1.stats.end_time or result2.stats.end_time

        # Merge error summaries
        merged_error_summary = dict(result1.error_summary)
        for error_type, count in result2.error_summary.items():
            merged_error_summary[error_type] = merged_error_summary.get(error_type, 0) + count

        return BatchResult(
            stats=merged_stats,
            results=result1.results + result2.results,
            errors=result1.errors + result2.errors,
            error_summary=merged_error_summary
        )


class StormBatchProcessor:
    """Batch processor for storm database exports."""

    def __init__(
        self,
        since_year: Optional[int] = None,
        drop_zero_impact: Optional[bool] = None,
        workers: Optional[int] = None,
        strict: bool = False
    ):
        """
        Initialize the batch processor.

        Args:
            since_year: Keep only events from this year onwards (None keeps all)
            drop_zero_impact: Drop rows without casualties or damage (defaults to config)
            workers: Worker threads used to normalise each file
            strict: Reject files containing negative counts or amounts
        """
        self.since_year = since_year
        self.drop_zero_impact = drop_zero_impact
        self.workers = workers

        # Shared across files so repeated labels resolve once
        self.normalizer = EventNormalizer(strict=strict)
        self.aggregator = Aggregator()

        logger.info(
            f"Initialized batch processor: since_year={since_year or 'all'}, "
            f"workers={workers or 1}, strict={strict}"
        )

    def process_batch(
        self,
        paths: List[str],
        progress_callback: Optional[Callable[[int, int, str], None]] = None
    ) -> BatchResult:
        """
        Process a batch of storm data files.

        Args:
            paths: Paths of the files to process
            progress_callback: Optional callback(current, total, message)

        Returns:
            BatchResult with all processing results
        """
        stats = BatchStats(
            total_files=len(paths),
            start_time=datetime.now()
        )

        results = []
        errors = []
        error_types = {}

        logger.info(f"Starting batch processing of {len(paths)} files")

        for idx, path in enumerate(paths):
            filename = os.path.basename(path)
            error_type = None
            error_message = ""

            try:
                if progress_callback:
                    progress_callback(idx + 1, len(paths), f"Processing: {filename}")

                logger.debug(f"Processing file {idx + 1}/{len(paths)}: {filename}")

                result = self._process_single_file(path)

                results.append(result)
                stats.processed += 1
                stats.successful += 1
                stats.total_records += result.record_count
                stats.unresolved_records += result.unresolved_count

            except FileNotFoundError as e:
                error_type, error_message = "FILE_NOT_FOUND", str(e)
                logger.error(f"File not found: {filename}")

            except MissingColumnsError as e:
                error_type, error_message = "MISSING_COLUMNS", str(e)
                logger.error(f"Missing columns in {filename}: {e}")

            except ValidationError as e:
                error_type, error_message = "DATA_VALIDATION_ERROR", str(e)
                logger.error(f"Data validation error in {filename}: {e}")

            except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
                error_type, error_message = "PARSE_ERROR", f"Unreadable file: {str(e)}"
                logger.error(f"Parse error in {filename}: {e}")

            except Exception as e:
                error_type, error_message = "PROCESSING_ERROR", f"{type(e).__name__}: {str(e)}"
                logger.error(f"Processing error in {filename}: {traceback.format_exc()}")

            if error_type:
                errors.append(ProcessingError(
                    file_name=filename,
                    error_type=error_type,
                    error_message=error_message
                ))
                stats.failed += 1
                stats.processed += 1
                error_types[error_type] = error_types.get(error_type, 0) + 1

        stats.end_time = datetime.now()

        logger.info(
            f"Batch processing complete: {stats.successful}/{stats.total_files} successful, "
            f"{stats.total_records} records, {stats.resolved_rate:.1f}% resolved, "
            f"time: {stats.processing_time:.1f}s"
        )

        return BatchResult(
            stats=stats,
            results=results,
            errors=errors,
            error_summary=error_types
        )

    def _process_single_file(self, path: str) -> FileResult:
        """Load, normalise and aggregate a single file."""
        records = load_storm_events(
            path,
            since_year=self.since_year,
            drop_zero_impact=self.drop_zero_impact
        )

        normalized = self.normalizer.normalize_records(records, workers=self.workers)
        summary = self.normalizer.get_resolution_summary(normalized)

        return FileResult(
            file_name=os.path.basename(path),
            record_count=len(normalized),
            unresolved_count=summary[MatchKind.UNRESOLVED.value],
            totals=self.aggregator.aggregate(normalized),
            resolution_summary=summary,
            unresolved_labels=self.normalizer.unresolved_labels(normalized),
        )

    def results_to_dataframe(self, results: List[FileResult]):
        """
        Convert per-file results to a pandas DataFrame.

        Args:
            results: List of FileResult objects

        Returns:
            pandas DataFrame
        """
        rows = []
        for result in results:
            rows.append({
                "File Name": result.file_name,
                "Records": result.record_count,
                "Unresolved Records": result.unresolved_count,
                "Event Types": len(result.totals),
                "Fatalities": sum(t.fatalities_sum for t in result.totals),
                "Injuries": sum(t.injuries_sum for t in result.totals),
                "Economic Cost": round(sum(t.economic_cost for t in result.totals), 2),
            })

        return pd.DataFrame(rows)

    def errors_to_dataframe(self, errors: List[ProcessingError]):
        """
        Convert processing errors to a pandas DataFrame.

        Args:
            errors: List of ProcessingError objects

        Returns:
            pandas DataFrame
        """
        rows = []
        for error in errors:
            rows.append({
                "File Name": error.file_name,
                "Error Type": error.error_type,
                "Error Message": error.error_message,
                "Timestamp": error.timestamp,
            })

        return pd.DataFrame(rows)

    def write_report(self, result: BatchResult, output_dir: str, top_n: Optional[int] = None) -> List[Path]:
        """
        Write combined totals and one ranking per metric as CSV files.

        Returns:
            Paths of the files written
        """
        out = Path(output_dir)
        out.mkdir(parents=True, exist_ok=True)

        report = result.build_report(top_n=top_n)
        written = []

        totals_path = out / "category_totals.csv"
        self.aggregator.totals_to_dataframe(report.totals).to_csv(totals_path, index=False)
        written.append(totals_path)

        for metric, ranked in report.rankings.items():
            ranking_path = out / f"top_{metric}.csv"
            self.aggregator.totals_to_dataframe(ranked).to_csv(ranking_path, index=False)
            written.append(ranking_path)

        if result.errors:
            errors_path = out / "errors.csv"
            self.errors_to_dataframe(result.errors).to_csv(errors_path, index=False)
            written.append(errors_path)

        logger.info(f"Wrote {len(written)} report files to {out}")
        return written


if __name__ == "__main__":
    if len(sys.argv) < 3:
        raise SystemExit("Usage: python storm_batch_processor.py OUTPUT_DIR STORM_CSV [STORM_CSV ...]")

    start_year = PIPELINE_CONFIG["ingest"]["complete_records_start_year"]
    processor = StormBatchProcessor(since_year=start_year)
    batch = processor.process_batch(sys.argv[2:])
    processor.write_report(batch, sys.argv[1])
