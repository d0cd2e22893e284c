"""
Statistical Analyzer

Descriptive statistics, histogram binning and box plot fences for a
numeric column, using NumPy with a Numba quantile kernel.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

import numpy as np
from numba import jit
from scipy import stats as scipy_stats

from config import get_settings
from core.cells import to_number
from core.dataset import Dataset
from core.logging_config import dashboard_logger as logger


@dataclass
class HistogramBin:
    """One equal-width histogram bin."""

    x0: float
    x1: float
    count: int

    @property
    def center(self) -> float:
        return (self.x0 + self.x1) / 2

    def to_dict(self) -> dict[str, Any]:
        return {
            "x0": self.x0,
            "x1": self.x1,
            "center": self.center,
            "count": self.count,
        }


@dataclass
class NumericSummary:
    """Descriptive statistics and histogram for a numeric column."""

    column: str
    count: int
    mean: float
    median: float
    q1: float
    q3: float
    std_dev: float
    min: float
    max: float
    skewness: float
    histogram: list[HistogramBin] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "column": self.column,
            "count": self.count,
            "mean": self.mean,
            "median": self.median,
            "q1": self.q1,
            "q3": self.q3,
            "std_dev": self.std_dev,
            "min": self.min,
            "max": self.max,
            "skewness": round(self.skewness, 4),
            "histogram": [b.to_dict() for b in self.histogram],
        }


@dataclass
class BoxPlotSummary:
    """Quartiles, IQR fences and outliers of a numeric column."""

    column: str
    count: int
    q1: float
    median: float
    q3: float
    iqr: float
    lower_fence: float
    upper_fence: float
    lower_whisker: float
    upper_whisker: float
    outlier_count: int
    outliers: list[float] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "column": self.column,
            "count": self.count,
            "q1": self.q1,
            "median": self.median,
            "q3": self.q3,
            "iqr": self.iqr,
            "lower_fence": self.lower_fence,
            "upper_fence": self.upper_fence,
            "lower_whisker": self.lower_whisker,
            "upper_whisker": self.upper_whisker,
            "outlier_count": self.outlier_count,
            "outliers": self.outliers,
        }


@jit(nopython=True, cache=True)
def _sorted_quantile(sorted_arr: np.ndarray, p: float) -> float:
    """Linear-interpolation quantile of an ascending array."""
    n = len(sorted_arr)
    idx = (n - 1) * p
    lower = int(np.floor(idx))
    upper = int(np.ceil(idx))

    if lower == upper:
        return sorted_arr[lower]

    weight = idx - lower
    return sorted_arr[lower] * (1 - weight) + sorted_arr[upper] * weight


def extract_numeric(values: Iterable[Any]) -> np.ndarray:
    """Finite floats of a cell sequence; other cells are skipped."""
    numbers = [n for n in (to_number(v) for v in values) if n is not None]
    return np.asarray(numbers, dtype=np.float64)


class StatisticalAnalyzer:
    """Numeric column summaries."""

    def __init__(self):
        self.settings = get_settings()

    def compute_histogram(
        self,
        arr: np.ndarray,
        n_bins: Optional[int] = None,
    ) -> list[HistogramBin]:
        """
        Equal-width bins spanning [min, max].

        Each bin holds values in [x0, x1); the last bin is closed. A
        constant column yields one bin.
        """
        if len(arr) == 0:
            return []

        if n_bins is None:
            n_bins = self.settings.dashboard.histogram_bins

        lo = float(np.min(arr))
        hi = float(np.max(arr))
        if lo == hi:
            return [HistogramBin(x0=lo, x1=hi, count=len(arr))]

        edges = np.linspace(lo, hi, n_bins + 1)
        counts, _ = np.histogram(arr, bins=edges)

        return [
            HistogramBin(x0=float(edges[i]), x1=float(edges[i + 1]), count=int(counts[i]))
            for i in range(n_bins)
        ]

    def summarize_values(self, column: str, arr: np.ndarray) -> NumericSummary:
        """Summarize an array of finite floats."""
        if len(arr) == 0:
            return NumericSummary(
                column=column, count=0, mean=0.0, median=0.0, q1=0.0, q3=0.0,
                std_dev=0.0, min=0.0, max=0.0, skewness=0.0, histogram=[],
            )

        sorted_arr = np.sort(arr)
        count = len(sorted_arr)
        std_dev = float(np.std(sorted_arr, ddof=1)) if count > 1 else 0.0

        skewness = 0.0
        if std_dev > 0:
            skewness = float(scipy_stats.skew(sorted_arr))

        return NumericSummary(
            column=column,
            count=count,
            mean=float(np.mean(sorted_arr)),
            median=float(_sorted_quantile(sorted_arr, 0.5)),
            q1=float(_sorted_quantile(sorted_arr, 0.25)),
            q3=float(_sorted_quantile(sorted_arr, 0.75)),
            std_dev=std_dev,
            min=float(sorted_arr[0]),
            max=float(sorted_arr[-1]),
            skewness=skewness,
            histogram=self.compute_histogram(sorted_arr),
        )

    def summarize(self, dataset: Dataset, column: str) -> NumericSummary:
        """
        Compute descriptive statistics for a column of the dataset.

        Cells that do not coerce to finite numbers are dropped. An unknown
        column summarizes like an empty one.
        """
        arr = extract_numeric(dataset.column_values(column))
        logger.debug(f"Summarizing '{column}': {len(arr)} numeric values of {dataset.row_count} rows")
        return self.summarize_values(column, arr)

    def box_plot(self, dataset: Dataset, column: str) -> BoxPlotSummary:
        """Compute box plot statistics with IQR fences."""
        arr = np.sort(extract_numeric(dataset.column_values(column)))

        if len(arr) == 0:
            return BoxPlotSummary(
                column=column, count=0, q1=0.0, median=0.0, q3=0.0, iqr=0.0,
                lower_fence=0.0, upper_fence=0.0, lower_whisker=0.0,
                upper_whisker=0.0, outlier_count=0, outliers=[],
            )

        q1 = float(_sorted_quantile(arr, 0.25))
        q3 = float(_sorted_quantile(arr, 0.75))
        iqr = q3 - q1
        multiplier = self.settings.dashboard.outlier_iqr_multiplier
        lower_fence = q1 - multiplier * iqr
        upper_fence = q3 + multiplier * iqr

        inside = arr[(arr >= lower_fence) & (arr <= upper_fence)]
        outside = arr[(arr < lower_fence) | (arr > upper_fence)]

        return BoxPlotSummary(
            column=column,
            count=len(arr),
            q1=q1,
            median=float(_sorted_quantile(arr, 0.5)),
            q3=q3,
            iqr=iqr,
            lower_fence=lower_fence,
            upper_fence=upper_fence,
            lower_whisker=float(inside[0]) if len(inside) else q1,
            upper_whisker=float(inside[-1]) if len(inside) else q3,
            outlier_count=len(outside),
            outliers=[float(v) for v in outside[: self.settings.dashboard.max_outliers_reported]],
        )


# Global instance
statistical_analyzer = StatisticalAnalyzer()
