"""
Correlation Pairs

Paired numeric columns for scatter charts, with Pearson correlation as
an annotation. The points themselves are passed through unaggregated.
"""

from dataclasses import dataclass, field
from typing import Any

import numpy as np
from scipy import stats as scipy_stats

from core.cells import to_number
from core.dataset import Dataset


@dataclass
class CorrelationPair:
    """Aligned numeric values of two columns."""

    column1: str
    column2: str
    x: list[float] = field(default_factory=list)
    y: list[float] = field(default_factory=list)
    pearson: float = 0.0
    pearson_pvalue: float = 1.0
    direction: str = "none"  # positive, negative, none

    @property
    def count(self) -> int:
        return len(self.x)

    def to_dict(self) -> dict[str, Any]:
        return {
            "column1": self.column1,
            "column2": self.column2,
            "count": self.count,
            "x": self.x,
            "y": self.y,
            "pearson": round(self.pearson, 4),
            "pearson_pvalue": round(self.pearson_pvalue, 6),
            "direction": self.direction,
        }


class CorrelationAnalyzer:
    """Builds scatter data for two numeric columns."""

    def compute_correlation_pair(
        self,
        dataset: Dataset,
        col1: str,
        col2: str,
    ) -> CorrelationPair:
        """
        Pair the numeric cells of two columns row by row.

        Rows where either cell is not numeric are dropped. Fewer than three
        pairs, or a constant column, leave the correlation at zero.
        """
        x, y = [], []
        for a, b in zip(dataset.column_values(col1), dataset.column_values(col2)):
            a_num, b_num = to_number(a), to_number(b)
            if a_num is None or b_num is None:
                continue
            x.append(a_num)
            y.append(b_num)

        pair = CorrelationPair(column1=col1, column2=col2, x=x, y=y)
        if len(x) < 3:
            return pair

        arr1 = np.asarray(x, dtype=np.float64)
        arr2 = np.asarray(y, dtype=np.float64)
        if np.ptp(arr1) == 0 or np.ptp(arr2) == 0:
            return pair

        pearson_r, pearson_p = scipy_stats.pearsonr(arr1, arr2)
        pair.pearson = float(pearson_r)
        pair.pearson_pvalue = float(pearson_p)

        if pair.pearson > 0:
            pair.direction = "positive"
        elif pair.pearson < 0:
            pair.direction = "negative"

        return pair


# Global instance
correlation_analyzer = CorrelationAnalyzer()
