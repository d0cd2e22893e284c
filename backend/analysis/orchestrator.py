"""
Chart Orchestrator

Maps each dashboard chart kind to the derivation engine that feeds it and
wraps the result in a renderable payload. A chart that cannot be built
comes back unavailable with a placeholder message; nothing here raises
into the rendering layer.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from analysis.categories import NO_DATA_LABEL, category_aggregator
from analysis.correlations import correlation_analyzer
from analysis.statistical import statistical_analyzer
from analysis.temporal import temporal_resampler
from api.schemas.responses import DatasetSummary
from config import get_settings
from core.dataset import Dataset
from core.logging_config import dashboard_logger as logger


class ChartKind(str, Enum):
    """Closed set of dashboard charts."""

    DISTRIBUTION = "distribution"
    OUTLIER = "outlier"
    TIME_SERIES = "time_series"
    CATEGORY = "category"
    PROPORTION = "proportion"
    CORRELATION = "correlation"


NO_NUMERIC_MESSAGE = "No numerical columns available"
NO_TIME_SERIES_MESSAGE = "No time series data available"
NO_CATEGORICAL_MESSAGE = "No categorical data available"
NO_CATEGORIES_MESSAGE = "No valid categories found in this column"
NO_CORRELATION_MESSAGE = "Insufficient numerical columns for correlation"
BUILD_FAILED_MESSAGE = "Chart data could not be prepared"


@dataclass
class ChartPayload:
    """Data for one chart, or the reason it is unavailable."""

    kind: ChartKind
    columns: list[str] = field(default_factory=list)
    available: bool = True
    data: dict[str, Any] = field(default_factory=dict)
    message: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "columns": self.columns,
            "available": self.available,
            "data": self.data,
            "message": self.message,
        }


def unavailable(kind: ChartKind, message: str, columns: Optional[list[str]] = None) -> ChartPayload:
    return ChartPayload(kind=kind, columns=columns or [], available=False, message=message)


class ChartOrchestrator:
    """
    Builds chart payloads from a dataset and its inferred summary.

    Default selections:
    - numeric charts use the first numeric column
    - category charts use the first categorical column
    - the time series uses the detected temporal column
    - correlation pairs the first two numeric columns
    """

    def __init__(self):
        self.settings = get_settings()

    def build(
        self,
        dataset: Dataset,
        summary: DatasetSummary,
        kind: ChartKind,
        column: Optional[str] = None,
        secondary_column: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> ChartPayload:
        """Build one chart, converting any failure into an unavailable payload."""
        try:
            if kind in (ChartKind.DISTRIBUTION, ChartKind.OUTLIER):
                return self._numeric_chart(dataset, summary, kind, column)
            if kind == ChartKind.TIME_SERIES:
                # column is the plotted value, secondary_column the time axis
                return self._time_series_chart(dataset, summary, column, secondary_column)
            if kind in (ChartKind.CATEGORY, ChartKind.PROPORTION):
                return self._category_chart(dataset, summary, kind, column, limit)
            return self._correlation_chart(dataset, summary, column, secondary_column)
        except Exception as e:
            logger.warning(f"Building {kind.value} chart failed: {e}")
            return unavailable(kind, BUILD_FAILED_MESSAGE)

    def _numeric_chart(
        self,
        dataset: Dataset,
        summary: DatasetSummary,
        kind: ChartKind,
        column: Optional[str],
    ) -> ChartPayload:
        column = column or next(iter(summary.numeric_columns), None)
        if column is None:
            return unavailable(kind, NO_NUMERIC_MESSAGE)

        if kind == ChartKind.OUTLIER:
            data = statistical_analyzer.box_plot(dataset, column).to_dict()
        else:
            data = statistical_analyzer.summarize(dataset, column).to_dict()
        return ChartPayload(kind=kind, columns=[column], data=data)

    def _time_series_chart(
        self,
        dataset: Dataset,
        summary: DatasetSummary,
        value_column: Optional[str],
        time_column: Optional[str],
    ) -> ChartPayload:
        value_column = value_column or next(iter(summary.numeric_columns), None)
        time_column = time_column or summary.temporal_column
        if value_column is None or time_column is None:
            return unavailable(ChartKind.TIME_SERIES, NO_TIME_SERIES_MESSAGE)

        series = temporal_resampler.resample(dataset, time_column, value_column)
        if series.is_empty:
            return unavailable(ChartKind.TIME_SERIES, NO_TIME_SERIES_MESSAGE, [time_column, value_column])

        return ChartPayload(
            kind=ChartKind.TIME_SERIES,
            columns=[time_column, value_column],
            data=series.to_dict(),
        )

    def _category_chart(
        self,
        dataset: Dataset,
        summary: DatasetSummary,
        kind: ChartKind,
        column: Optional[str],
        limit: Optional[int],
    ) -> ChartPayload:
        column = column or next(iter(summary.categorical_columns), None)
        if column is None:
            return unavailable(kind, NO_CATEGORICAL_MESSAGE)

        if limit is None:
            limit = (
                self.settings.dashboard.treemap_top_k
                if kind == ChartKind.CATEGORY
                else self.settings.dashboard.pie_top_k
            )

        aggregate = category_aggregator.aggregate(dataset, column)
        if kind == ChartKind.PROPORTION and aggregate.order == [NO_DATA_LABEL]:
            return unavailable(kind, NO_CATEGORIES_MESSAGE, [column])

        display = category_aggregator.collapse_top_k(aggregate, limit)
        return ChartPayload(
            kind=kind,
            columns=[column],
            data={**display.to_dict(), "limit": limit, "distinct_count": len(aggregate.counts)},
        )

    def _correlation_chart(
        self,
        dataset: Dataset,
        summary: DatasetSummary,
        column: Optional[str],
        secondary_column: Optional[str],
    ) -> ChartPayload:
        numeric = summary.numeric_columns
        x = column or (numeric[0] if len(numeric) > 1 else None)
        y = secondary_column or (numeric[1] if len(numeric) > 1 else None)
        if x is None or y is None:
            return unavailable(ChartKind.CORRELATION, NO_CORRELATION_MESSAGE)

        pair = correlation_analyzer.compute_correlation_pair(dataset, x, y)
        return ChartPayload(kind=ChartKind.CORRELATION, columns=[x, y], data=pair.to_dict())

    async def build_overview(
        self,
        dataset: Dataset,
        summary: DatasetSummary,
    ) -> list[ChartPayload]:
        """Build every chart kind with default selections, concurrently."""
        logger.info(f"Building dashboard overview for {dataset.row_count} rows")
        tasks = [
            asyncio.to_thread(self.build, dataset, summary, kind)
            for kind in ChartKind
        ]
        charts = await asyncio.gather(*tasks)
        logger.success(f"Built {sum(c.available for c in charts)} of {len(charts)} charts")
        return list(charts)


# Global instance
chart_orchestrator = ChartOrchestrator()
