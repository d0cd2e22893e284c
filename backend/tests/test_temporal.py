"""
Test Temporal Resampler

Unit tests for time series pairing and chunk-mean downsampling.
"""

from datetime import datetime, timedelta

import pytest

from analysis.temporal import TemporalResampler
from core.dataset import Dataset


@pytest.fixture
def resampler():
    return TemporalResampler()


def daily_dataset(n: int) -> Dataset:
    start = datetime(2020, 1, 1)
    rows = [
        {"day": (start + timedelta(days=i)).strftime("%Y-%m-%d"), "value": str(i)}
        for i in range(n)
    ]
    return Dataset.from_records(["day", "value"], rows)


class TestBuildPairs:
    def test_sorted_by_instant(self, resampler):
        dataset = Dataset.from_records(
            ["t", "v"],
            [
                {"t": "2024-03-01", "v": 3},
                {"t": "2024-01-01", "v": 1},
                {"t": "2024-02-01", "v": 2},
            ],
        )
        pairs = resampler.build_pairs(dataset, "t", "v")

        assert [v for _, v in pairs] == [1.0, 2.0, 3.0]

    def test_equal_instants_keep_row_order(self, resampler):
        dataset = Dataset.from_records(
            ["t", "v"],
            [{"t": "2024-01-02", "v": 9}, {"t": "2024-01-01", "v": 5}, {"t": "2024-01-01", "v": 6}],
        )
        pairs = resampler.build_pairs(dataset, "t", "v")

        assert [v for _, v in pairs] == [5.0, 6.0, 9.0]

    def test_drops_unparseable_rows(self, resampler):
        dataset = Dataset.from_records(
            ["t", "v"],
            [
                {"t": "2024-01-01", "v": "10"},
                {"t": "not a date", "v": "11"},
                {"t": "2024-01-03", "v": "n/a"},
                {"t": None, "v": 4},
                {"v": 5},
            ],
        )
        pairs = resampler.build_pairs(dataset, "t", "v")

        assert pairs == [(datetime(2024, 1, 1), 10.0)]


class TestDownsample:
    def test_small_series_untouched(self, resampler):
        series = resampler.resample(daily_dataset(50), "day", "value")

        assert len(series.points) == 50
        assert series.chunk_size == 1
        assert series.points[0].timestamp == datetime(2020, 1, 1)

    def test_large_series_chunked(self, resampler):
        series = resampler.resample(daily_dataset(2500), "day", "value")

        assert series.source_points == 2500
        assert series.chunk_size == 3
        assert len(series.points) == 834
        assert len(series.points) <= 1000

    def test_chunk_means_and_first_timestamps(self, resampler):
        series = resampler.resample(daily_dataset(2500), "day", "value")

        first, second, last = series.points[0], series.points[1], series.points[-1]
        assert first.timestamp == datetime(2020, 1, 1)
        assert first.value == pytest.approx(1.0)
        assert second.timestamp == datetime(2020, 1, 4)
        assert second.value == pytest.approx(4.0)
        # Final chunk holds only the last value
        assert last.value == pytest.approx(2499.0)

    def test_points_are_ordered(self, resampler):
        series = resampler.resample(daily_dataset(2500), "day", "value")
        stamps = [p.timestamp for p in series.points]

        assert stamps == sorted(stamps)

    def test_custom_cap(self, resampler):
        series = resampler.resample(daily_dataset(10), "day", "value", max_points=4)

        assert series.chunk_size == 3
        assert [p.value for p in series.points] == pytest.approx([1.0, 4.0, 7.0, 9.0])


class TestResample:
    def test_missing_time_column(self, resampler):
        series = resampler.resample(daily_dataset(5), None, "value")

        assert series.is_empty
        assert series.source_points == 0

    def test_unknown_time_column(self, resampler):
        series = resampler.resample(daily_dataset(5), "nope", "value")

        assert series.is_empty

    def test_no_valid_pairs(self, resampler):
        dataset = Dataset.from_records(["t", "v"], [{"t": "2024-01-01", "v": "x"}])

        assert resampler.resample(dataset, "t", "v").is_empty

    def test_repeat_resamples_are_equal(self, resampler):
        dataset = daily_dataset(2500)

        first = resampler.resample(dataset, "day", "value")
        second = resampler.resample(dataset, "day", "value")

        assert first == second

    def test_to_dict(self, resampler):
        data = resampler.resample(daily_dataset(2), "day", "value").to_dict()

        assert data["points"][0] == {"timestamp": "2020-01-01T00:00:00", "value": 0.0}
        assert data["time_column"] == "day"
