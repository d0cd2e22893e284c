"""
Temporal Resampler

Builds a time-ordered (instant, value) series for a numeric column and
downsamples it by chunk means so render cost stays bounded.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from operator import itemgetter
from typing import Any, Optional

import numpy as np
from numba import jit

from config import get_settings
from core.cells import parse_instants, to_number
from core.dataset import Dataset
from core.logging_config import dashboard_logger as logger


@dataclass
class TimeSeriesPoint:
    """A single point of a time series."""

    timestamp: datetime
    value: float

    def to_dict(self) -> dict[str, Any]:
        return {"timestamp": self.timestamp.isoformat(), "value": self.value}


@dataclass
class TimeSeries:
    """Downsampled series for one value column against a time column."""

    time_column: Optional[str]
    value_column: str
    source_points: int
    chunk_size: int
    points: list[TimeSeriesPoint] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.points

    def to_dict(self) -> dict[str, Any]:
        return {
            "time_column": self.time_column,
            "value_column": self.value_column,
            "source_points": self.source_points,
            "chunk_size": self.chunk_size,
            "points": [p.to_dict() for p in self.points],
        }


@jit(nopython=True, cache=True)
def _chunk_means(values: np.ndarray, step: int) -> np.ndarray:
    """Arithmetic mean of each contiguous chunk of `step` values."""
    n = len(values)
    n_chunks = (n + step - 1) // step
    result = np.empty(n_chunks, dtype=np.float64)

    for c in range(n_chunks):
        start = c * step
        end = min(start + step, n)
        total = 0.0
        for i in range(start, end):
            total += values[i]
        result[c] = total / (end - start)

    return result


class TemporalResampler:
    """Time series extraction and chunk-mean downsampling."""

    def __init__(self):
        self.settings = get_settings()

    def build_pairs(
        self,
        dataset: Dataset,
        time_column: str,
        value_column: str,
    ) -> list[tuple[datetime, float]]:
        """
        Pair parsed instants with parsed numbers, sorted by instant.

        Rows where either cell fails to parse are dropped. Rows with equal
        instants keep their original order.
        """
        instants = parse_instants(list(dataset.column_values(time_column)))
        pairs = []
        for moment, raw in zip(instants, dataset.column_values(value_column)):
            if moment is None:
                continue
            value = to_number(raw)
            if value is None:
                continue
            pairs.append((moment, value))

        pairs.sort(key=itemgetter(0))
        return pairs

    def downsample(
        self,
        pairs: list[tuple[datetime, float]],
        max_points: Optional[int] = None,
    ) -> tuple[list[TimeSeriesPoint], int]:
        """
        Collapse a sorted series to at most `max_points` points.

        Each output point takes the first timestamp of its chunk and the
        mean of the chunk's values. Returns the points and the chunk size.
        """
        if max_points is None:
            max_points = self.settings.dashboard.max_series_points

        n = len(pairs)
        if n <= max_points:
            return [TimeSeriesPoint(timestamp=t, value=v) for t, v in pairs], 1

        step = math.ceil(n / max_points)
        values = np.fromiter((v for _, v in pairs), dtype=np.float64, count=n)
        means = _chunk_means(values, step)

        points = [
            TimeSeriesPoint(timestamp=pairs[start][0], value=float(mean))
            for start, mean in zip(range(0, n, step), means)
        ]
        return points, step

    def resample(
        self,
        dataset: Dataset,
        time_column: Optional[str],
        value_column: str,
        max_points: Optional[int] = None,
    ) -> TimeSeries:
        """
        Build the downsampled series of `value_column` over `time_column`.

        A missing time column or zero valid pairs gives an empty series.
        """
        if not time_column or not dataset.has_column(time_column):
            return TimeSeries(
                time_column=time_column,
                value_column=value_column,
                source_points=0,
                chunk_size=1,
            )

        pairs = self.build_pairs(dataset, time_column, value_column)
        points, step = self.downsample(pairs, max_points)

        logger.debug(
            f"Resampled '{value_column}' over '{time_column}': "
            f"{len(pairs)} pairs -> {len(points)} points (chunk={step})"
        )

        return TimeSeries(
            time_column=time_column,
            value_column=value_column,
            source_points=len(pairs),
            chunk_size=step,
            points=points,
        )


# Global instance
temporal_resampler = TemporalResampler()
