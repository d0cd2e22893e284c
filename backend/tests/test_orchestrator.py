"""
Test Chart Orchestrator

Unit tests for default chart selection and unavailable placeholders.
"""

import asyncio

import pytest

from analysis.orchestrator import (
    NO_CATEGORIES_MESSAGE,
    NO_CORRELATION_MESSAGE,
    NO_NUMERIC_MESSAGE,
    NO_TIME_SERIES_MESSAGE,
    ChartKind,
    ChartOrchestrator,
)
from core.dataset import Dataset
from core.type_inference import TypeInferrer


@pytest.fixture
def orchestrator():
    return ChartOrchestrator()


@pytest.fixture
def sales():
    rows = [
        {
            "date": f"2024-01-{d:02d}",
            "revenue": str(100 + d * 5),
            "units": str(d % 7),
            "region": ["North", "South", "East", "West"][d % 4],
        }
        for d in range(1, 29)
    ]
    return Dataset.from_records(["date", "revenue", "units", "region"], rows)


@pytest.fixture
def labels_only():
    return Dataset.from_records(["tag"], [{"tag": t} for t in ["a", "b", "a"]])


def summarize(dataset):
    return TypeInferrer().summarize(dataset)


class TestBuild:
    def test_distribution_defaults_to_first_numeric(self, orchestrator, sales):
        chart = orchestrator.build(sales, summarize(sales), ChartKind.DISTRIBUTION)

        assert chart.available
        assert chart.columns == ["revenue"]
        assert len(chart.data["histogram"]) == 20

    def test_outlier_chart(self, orchestrator, sales):
        chart = orchestrator.build(sales, summarize(sales), ChartKind.OUTLIER, column="units")

        assert chart.available
        assert chart.data["column"] == "units"
        assert "upper_fence" in chart.data

    def test_time_series(self, orchestrator, sales):
        chart = orchestrator.build(sales, summarize(sales), ChartKind.TIME_SERIES)

        assert chart.available
        assert chart.columns == ["date", "revenue"]
        assert len(chart.data["points"]) == 28

    def test_category_uses_treemap_limit(self, orchestrator, sales):
        chart = orchestrator.build(sales, summarize(sales), ChartKind.CATEGORY)

        assert chart.columns == ["region"]
        assert chart.data["limit"] == 15
        assert chart.data["distinct_count"] == 4
        assert sum(chart.data["counts"]) == 28

    def test_proportion_collapses_to_pie_limit(self, orchestrator):
        rows = [{"c": f"k{i}"} for i in range(10) for _ in range(i + 1)]
        dataset = Dataset.from_records(["c"], rows)
        chart = orchestrator.build(dataset, summarize(dataset), ChartKind.PROPORTION)

        assert chart.data["limit"] == 6
        assert len(chart.data["categories"]) == 6
        assert chart.data["categories"][-1] == "Other"

    def test_proportion_without_data(self, orchestrator):
        dataset = Dataset.from_records(["c"], [])
        chart = orchestrator.build(dataset, summarize(dataset), ChartKind.PROPORTION)

        assert not chart.available
        assert chart.message == NO_CATEGORIES_MESSAGE

    def test_correlation_pairs_first_numeric_columns(self, orchestrator, sales):
        chart = orchestrator.build(sales, summarize(sales), ChartKind.CORRELATION)

        assert chart.available
        assert chart.columns == ["revenue", "units"]
        assert chart.data["count"] == 28

    def test_unavailable_without_numeric(self, orchestrator, labels_only):
        summary = summarize(labels_only)

        assert orchestrator.build(labels_only, summary, ChartKind.DISTRIBUTION).message == NO_NUMERIC_MESSAGE
        assert orchestrator.build(labels_only, summary, ChartKind.TIME_SERIES).message == NO_TIME_SERIES_MESSAGE
        assert orchestrator.build(labels_only, summary, ChartKind.CORRELATION).message == NO_CORRELATION_MESSAGE


class TestOverview:
    def test_every_kind_built(self, orchestrator, sales):
        charts = asyncio.run(orchestrator.build_overview(sales, summarize(sales)))

        assert [c.kind for c in charts] == list(ChartKind)
        assert all(c.available for c in charts)
