"""
Test suite for per-category aggregation and ranking.

Tests cover:
- Conservation of casualties and costs across the pipeline
- Deterministic totals and rankings
- Stable top-N ordering on ties
- Chunked aggregation matching serial aggregation
- run_storm_impact_analysis report contents
"""

import math
import unittest

from storm_impact_engine import run_storm_impact_analysis
from storm_impact_engine.aggregation.aggregator import Aggregator, CategoryTotals, RANKING_METRICS
from storm_impact_engine.normalisation.costs import cost
from storm_impact_engine.normalisation.engine import EventNormalizer
from storm_impact_engine.records import RawRecord


def make_record(label, fatalities=0, injuries=0, prop=0.0, prop_code="", crop=0.0, crop_code=""):
    return RawRecord(
        timestamp=None,
        event_label=label,
        fatalities=fatalities,
        injuries=injuries,
        property_amount=prop,
        property_unit_code=prop_code,
        crop_amount=crop,
        crop_unit_code=crop_code,
    )


SAMPLE_RECORDS = [
    make_record("TORNADO", fatalities=5, injuries=40, prop=2.5, prop_code="M"),
    make_record("TSTM WIND", fatalities=1, injuries=3, prop=50, prop_code="K", crop=5, crop_code="K"),
    make_record("EXCESSIVE HEAT", fatalities=12, injuries=30),
    make_record("FLASH FLOODING", fatalities=2, prop=1.2, prop_code="B", crop=10, crop_code="M"),
    make_record("Tornado", fatalities=3, injuries=10, prop=700, prop_code="K"),
    make_record("MUDSLIDE", injuries=1, prop=20, prop_code="9"),
    make_record("HURRICANE/TYPHOON", prop=3, prop_code="b", crop=2, crop_code="B"),
    make_record("HIGH WINDS", fatalities=1, prop=10, prop_code="3"),
]


class TestAggregate(unittest.TestCase):
    """Test grouping and summing."""

    def setUp(self):
        self.normalizer = EventNormalizer()
        self.aggregator = Aggregator()
        self.normalized = self.normalizer.normalize_records(SAMPLE_RECORDS)
        self.totals = self.aggregator.aggregate(self.normalized)
        self.by_label = {t.label: t for t in self.totals}

    def test_groups_in_discovery_order(self):
        self.assertEqual([t.label for t in self.totals], [
            "TORNADO", "STRONG WIND", "EXCESSIVE HEAT", "FLOOD",
            "MUDSLIDE", "HURRICANE (TYPHOON)", "HIGH WIND",
        ])

    def test_group_sums(self):
        tornado = self.by_label["TORNADO"]
        self.assertEqual(tornado.fatalities_sum, 8)
        self.assertEqual(tornado.injuries_sum, 50)
        self.assertEqual(tornado.property_cost_sum, 2.5e6 + 700e3)
        self.assertEqual(tornado.record_count, 2)

    def test_unresolved_labels_still_counted(self):
        mudslide = self.by_label["MUDSLIDE"]
        self.assertEqual(mudslide.injuries_sum, 1)
        self.assertEqual(mudslide.property_cost_sum, 20)

    def test_derived_metrics(self):
        flood = self.by_label["FLOOD"]
        self.assertEqual(flood.health_impact, 2)
        self.assertTrue(math.isclose(flood.economic_cost, 1.21e9))

    def test_conservation(self):
        """Casualties and costs over totals equal those over raw records."""
        self.assertEqual(
            sum(t.fatalities_sum for t in self.totals),
            sum(r.fatalities for r in SAMPLE_RECORDS)
        )
        self.assertEqual(
            sum(t.injuries_sum for t in self.totals),
            sum(r.injuries for r in SAMPLE_RECORDS)
        )
        self.assertTrue(math.isclose(
            sum(t.property_cost_sum for t in self.totals),
            sum(cost(r.property_amount, r.property_unit_code) for r in SAMPLE_RECORDS)
        ))
        self.assertTrue(math.isclose(
            sum(t.crop_cost_sum for t in self.totals),
            sum(cost(r.crop_amount, r.crop_unit_code) for r in SAMPLE_RECORDS)
        ))
        self.assertEqual(sum(t.record_count for t in self.totals), len(SAMPLE_RECORDS))

    def test_deterministic(self):
        again = Aggregator().aggregate(EventNormalizer().normalize_records(SAMPLE_RECORDS))
        self.assertEqual(again, self.totals)

    def test_empty_input(self):
        self.assertEqual(self.aggregator.aggregate([]), [])


class TestTopN(unittest.TestCase):
    """Test per-metric rankings."""

    def setUp(self):
        self.aggregator = Aggregator()
        self.totals = [
            CategoryTotals(label="A", fatalities_sum=5, injuries_sum=1, property_cost_sum=10.0),
            CategoryTotals(label="B", fatalities_sum=7, injuries_sum=9, property_cost_sum=5.0),
            CategoryTotals(label="C", fatalities_sum=5, injuries_sum=2, crop_cost_sum=30.0),
            CategoryTotals(label="D", fatalities_sum=5, injuries_sum=0),
            CategoryTotals(label="E", fatalities_sum=1, injuries_sum=0),
        ]

    def test_ranks_descending(self):
        ranked = self.aggregator.top_n(self.totals, 2, by="injuries")
        self.assertEqual([t.label for t in ranked], ["B", "C"])

    def test_ties_keep_discovery_order(self):
        ranked = self.aggregator.top_n(self.totals, 3, by="fatalities")
        self.assertEqual([t.label for t in ranked], ["B", "A", "C"])

    def test_tied_ranking_reproducible(self):
        tied = [CategoryTotals(label=label, fatalities_sum=4) for label in "PQRST"]
        runs = [[t.label for t in self.aggregator.top_n(tied, 3, by="fatalities")] for _ in range(5)]
        self.assertEqual(runs, [["P", "Q", "R"]] * 5)

    def test_metrics_rank_independently(self):
        rankings = self.aggregator.rank_all(self.totals, 1)
        self.assertEqual(set(rankings), set(RANKING_METRICS))
        self.assertEqual(rankings["fatalities"][0].label, "B")
        self.assertEqual(rankings["property_cost"][0].label, "A")
        self.assertEqual(rankings["crop_cost"][0].label, "C")
        self.assertEqual(rankings["economic_cost"][0].label, "C")
        self.assertEqual(rankings["health_impact"][0].label, "B")

    def test_n_larger_than_groups(self):
        self.assertEqual(len(self.aggregator.top_n(self.totals, 50, by="injuries")), 5)

    def test_non_positive_n(self):
        self.assertEqual(self.aggregator.top_n(self.totals, 0, by="injuries"), [])

    def test_unknown_metric(self):
        with self.assertRaises(ValueError):
            self.aggregator.top_n(self.totals, 3, by="label")


class TestChunkedAggregation(unittest.TestCase):
    """Test merging partial sums from independent chunks."""

    def setUp(self):
        self.aggregator = Aggregator()
        self.normalized = EventNormalizer().normalize_records(SAMPLE_RECORDS * 5)

    def test_chunks_match_serial(self):
        serial = self.aggregator.aggregate(self.normalized)
        chunks = [self.normalized[i:i + 3] for i in range(0, len(self.normalized), 3)]
        for workers in (None, 4):
            merged = self.aggregator.aggregate_chunks(chunks, workers=workers)
            self.assertEqual([t.label for t in merged], [t.label for t in serial])
            for left, right in zip(merged, serial):
                self.assertEqual(left.fatalities_sum, right.fatalities_sum)
                self.assertEqual(left.injuries_sum, right.injuries_sum)
                self.assertEqual(left.record_count, right.record_count)
                self.assertTrue(math.isclose(left.property_cost_sum, right.property_cost_sum))
                self.assertTrue(math.isclose(left.crop_cost_sum, right.crop_cost_sum))

    def test_merge_does_not_mutate_partials(self):
        partial = [CategoryTotals(label="HAIL", fatalities_sum=1, record_count=1)]
        self.aggregator.merge([partial, partial])
        self.assertEqual(partial[0].fatalities_sum, 1)


class TestTotalsToDataFrame(unittest.TestCase):

    def test_columns(self):
        totals = [CategoryTotals(label="HAIL", fatalities_sum=1, injuries_sum=2,
                                 property_cost_sum=3.0, crop_cost_sum=4.0, record_count=1)]
        df = Aggregator().totals_to_dataframe(totals)
        self.assertEqual(list(df.columns), [
            "Event Type", "Records", "Fatalities", "Injuries", "Health Impact",
            "Property Cost", "Crop Cost", "Economic Cost",
        ])
        self.assertEqual(df.loc[0, "Health Impact"], 3)
        self.assertEqual(df.loc[0, "Economic Cost"], 7.0)


class TestRunStormImpactAnalysis(unittest.TestCase):
    """Test the main entry point."""

    def test_report(self):
        report = run_storm_impact_analysis(SAMPLE_RECORDS, top_n=3)
        self.assertEqual(report.record_count, len(SAMPLE_RECORDS))
        self.assertEqual(report.top_n, 3)
        self.assertEqual(
            [t.label for t in report.rankings["fatalities"]],
            ["EXCESSIVE HEAT", "TORNADO", "FLOOD"]
        )
        self.assertEqual(report.rankings["economic_cost"][0].label, "HURRICANE (TYPHOON)")
        self.assertEqual(report.resolution_summary, {
            "exact_or_fuzzy": 4,
            "rule_rewritten": 3,
            "unresolved": 1,
        })
        self.assertEqual(report.unresolved_labels, {"MUDSLIDE": 1})

    def test_default_top_n(self):
        report = run_storm_impact_analysis(SAMPLE_RECORDS)
        self.assertEqual(report.top_n, 10)
        self.assertEqual(len(report.rankings["injuries"]), 7)

    def test_parallel_report_matches_serial(self):
        serial = run_storm_impact_analysis(SAMPLE_RECORDS * 3, top_n=5)
        parallel = run_storm_impact_analysis(SAMPLE_RECORDS * 3, top_n=5, workers=3)
        for metric in RANKING_METRICS:
            self.assertEqual(
                [t.label for t in serial.rankings[metric]],
                [t.label for t in parallel.rankings[metric]]
            )
        self.assertEqual(serial.resolution_summary, parallel.resolution_summary)

    def test_deterministic(self):
        first = run_storm_impact_analysis(SAMPLE_RECORDS)
        second = run_storm_impact_analysis(SAMPLE_RECORDS)
        self.assertEqual(first, second)


if __name__ == "__main__":
    unittest.main()
