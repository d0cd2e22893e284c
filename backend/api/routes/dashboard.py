"""
Dashboard API Routes

Chart data endpoints: statistics, categories, time series, correlation
and the full default overview. Derived results are cached per session.
"""

import time
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from analysis.categories import category_aggregator
from analysis.correlations import correlation_analyzer
from analysis.orchestrator import ChartKind, chart_orchestrator
from analysis.statistical import statistical_analyzer
from analysis.temporal import temporal_resampler
from api.deps import get_session, require_column
from api.schemas.responses import (
    BoxPlotResponse,
    CategoryBreakdownResponse,
    ChartPayloadModel,
    CorrelationResponse,
    DashboardOverviewResponse,
    DatasetSummary,
    NumericSummaryResponse,
    TimeSeriesResponse,
)
from core.cache import Session, derivation_cache


router = APIRouter()


@router.get("/dashboard/{session_id}/summary", response_model=DatasetSummary)
def get_summary(session: Session = Depends(get_session)) -> DatasetSummary:
    """Inferred column kinds and the detected temporal column."""
    return session.summary


@router.get("/dashboard/{session_id}/statistics/{column}", response_model=NumericSummaryResponse)
def get_statistics(
    column: str,
    session: Session = Depends(get_session),
) -> NumericSummaryResponse:
    """Descriptive statistics and 20-bin histogram of a numeric column."""
    require_column(session, column)
    key = derivation_cache.session_key(session.session_id, "statistics", column)
    result = derivation_cache.get_or_compute(
        key, lambda: statistical_analyzer.summarize(session.dataset, column)
    )
    return NumericSummaryResponse(**result.to_dict())


@router.get("/dashboard/{session_id}/boxplot/{column}", response_model=BoxPlotResponse)
def get_box_plot(
    column: str,
    session: Session = Depends(get_session),
) -> BoxPlotResponse:
    """Quartiles, IQR fences and outliers of a numeric column."""
    require_column(session, column)
    key = derivation_cache.session_key(session.session_id, "boxplot", column)
    result = derivation_cache.get_or_compute(
        key, lambda: statistical_analyzer.box_plot(session.dataset, column)
    )
    return BoxPlotResponse(**result.to_dict())


@router.get("/dashboard/{session_id}/categories/{column}", response_model=CategoryBreakdownResponse)
def get_categories(
    column: str,
    limit: Optional[int] = Query(default=None, ge=1, le=100, description="Top-K for display (omit for the full aggregate)"),
    session: Session = Depends(get_session),
) -> CategoryBreakdownResponse:
    """
    Frequency breakdown of a column.

    With `limit`, the top `limit - 1` labels are kept and the rest merged
    into "Other".
    """
    require_column(session, column)
    key = derivation_cache.session_key(session.session_id, "categories", column)
    aggregate = derivation_cache.get_or_compute(
        key, lambda: category_aggregator.aggregate(session.dataset, column)
    )

    if limit is None:
        data = aggregate.to_dict()
    else:
        data = category_aggregator.collapse_top_k(aggregate, limit).to_dict()

    return CategoryBreakdownResponse(
        column=column,
        limit=limit,
        categories=data["categories"],
        counts=data["counts"],
        percentages=data["percentages"],
        total_count=data["total_count"],
        distinct_count=len(aggregate.counts),
    )


@router.get("/dashboard/{session_id}/timeseries", response_model=TimeSeriesResponse)
def get_time_series(
    value_column: str = Query(..., description="Numeric column to plot"),
    time_column: Optional[str] = Query(default=None, description="Time column (defaults to the detected one)"),
    session: Session = Depends(get_session),
) -> TimeSeriesResponse:
    """Downsampled time series; empty when no time column qualifies."""
    require_column(session, value_column)
    time_column = time_column or session.summary.temporal_column
    if time_column is not None:
        require_column(session, time_column)

    key = derivation_cache.session_key(session.session_id, "timeseries", value_column, time_column)
    series = derivation_cache.get_or_compute(
        key, lambda: temporal_resampler.resample(session.dataset, time_column, value_column)
    )
    return TimeSeriesResponse(**series.to_dict())


@router.get("/dashboard/{session_id}/correlation", response_model=CorrelationResponse)
def get_correlation(
    x: str = Query(..., description="First numeric column"),
    y: str = Query(..., description="Second numeric column"),
    session: Session = Depends(get_session),
) -> CorrelationResponse:
    """Paired numeric values of two columns with Pearson correlation."""
    require_column(session, x)
    require_column(session, y)
    pair = correlation_analyzer.compute_correlation_pair(session.dataset, x, y)
    return CorrelationResponse(**pair.to_dict())


@router.get("/dashboard/{session_id}/charts/{kind}", response_model=ChartPayloadModel)
def get_chart(
    kind: ChartKind,
    column: Optional[str] = Query(default=None),
    secondary_column: Optional[str] = Query(default=None),
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    session: Session = Depends(get_session),
) -> ChartPayloadModel:
    """One chart with default column selections where none are given."""
    for name in (column, secondary_column):
        if name is not None:
            require_column(session, name)

    payload = chart_orchestrator.build(
        session.dataset,
        session.summary,
        kind,
        column=column,
        secondary_column=secondary_column,
        limit=limit,
    )
    return ChartPayloadModel(**payload.to_dict())


@router.get("/dashboard/{session_id}/overview", response_model=DashboardOverviewResponse)
async def get_overview(session: Session = Depends(get_session)) -> DashboardOverviewResponse:
    """Every chart kind with its default selection."""
    start_time = time.perf_counter()

    try:
        charts = await chart_orchestrator.build_overview(session.dataset, session.summary)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error building dashboard: {str(e)}")

    return DashboardOverviewResponse(
        session_id=session.session_id,
        generated_at=datetime.now(),
        processing_time_ms=round((time.perf_counter() - start_time) * 1000, 2),
        summary=session.summary,
        charts=[ChartPayloadModel(**c.to_dict()) for c in charts],
    )
