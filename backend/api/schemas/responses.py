"""
API Response Schemas

Pydantic models for API responses.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

import numpy as np
from pydantic import BaseModel, Field, field_serializer


def convert_numpy(obj: Any) -> Any:
    """Convert numpy types to Python native types."""
    if obj is None:
        return None
    if isinstance(obj, np.bool_):
        return bool(obj)
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, dict):
        return {k: convert_numpy(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [convert_numpy(v) for v in obj]
    return obj


class ColumnKind(str, Enum):
    """Inferred semantic type of a column."""

    NUMERIC = "numeric"
    TEMPORAL = "temporal"
    CATEGORICAL = "categorical"


class ColumnProfile(BaseModel):
    """Inferred type of a single column."""

    name: str
    kind: ColumnKind
    confidence: float = Field(..., ge=0, le=1)
    sampled: int = Field(default=0, description="Non-null cells sampled")


class DatasetSummary(BaseModel):
    """Column classification of a whole dataset."""

    row_count: int
    column_count: int
    profiles: list[ColumnProfile]
    numeric_columns: list[str] = []
    categorical_columns: list[str] = []
    temporal_columns: list[str] = []
    temporal_column: Optional[str] = Field(
        default=None,
        description="Highest-scoring temporal column, if any"
    )


class HistogramBinModel(BaseModel):
    x0: float
    x1: float
    center: float
    count: int


class NumericSummaryResponse(BaseModel):
    """Descriptive statistics for a numeric column."""

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
    histogram: list[HistogramBinModel] = []


class BoxPlotResponse(BaseModel):
    """Box plot statistics for a numeric column."""

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
    outliers: list[float] = []


class CategoryBreakdownResponse(BaseModel):
    """Frequency breakdown of a categorical column."""

    column: str
    limit: Optional[int] = Field(
        default=None,
        description="Top-K used for the display view (None = full aggregate)"
    )
    categories: list[str]
    counts: list[int]
    percentages: list[float]
    total_count: int
    distinct_count: int


class TimeSeriesPointModel(BaseModel):
    timestamp: datetime
    value: float


class TimeSeriesResponse(BaseModel):
    """Downsampled time series."""

    time_column: Optional[str]
    value_column: str
    source_points: int
    chunk_size: int
    points: list[TimeSeriesPointModel] = []


class CorrelationResponse(BaseModel):
    """Scatter data for two numeric columns."""

    column1: str
    column2: str
    count: int
    x: list[float]
    y: list[float]
    pearson: float
    pearson_pvalue: float
    direction: str


class ChartPayloadModel(BaseModel):
    """A single chart's data, or the reason it is unavailable."""

    kind: str
    columns: list[str] = []
    available: bool
    data: dict[str, Any] = {}
    message: Optional[str] = None

    @field_serializer('data')
    def serialize_data(self, v: Any) -> Any:
        return convert_numpy(v)


class DashboardOverviewResponse(BaseModel):
    """Every default chart of the dashboard."""

    session_id: str
    generated_at: datetime
    processing_time_ms: float
    summary: DatasetSummary
    charts: list[ChartPayloadModel] = []


class TableViewResponse(BaseModel):
    """One page of the interactive grid."""

    headers: list[str]
    rows: list[list[str]]
    current_page: int
    total_pages: int
    range_start: int
    range_end: int
    total_filtered: int
    total_rows: int
    search_term: str = ""
    selected_column: Optional[str] = None
    sort_column: Optional[str] = None
    sort_direction: Optional[str] = None


class SessionInfo(BaseModel):
    """Session information."""

    session_id: str
    name: str
    created_at: datetime
    row_count: int
    column_count: int
    columns: list[str]
    status: str


class UploadResponse(BaseModel):
    """Dataset ingestion response."""

    session_id: str
    name: str
    row_count: int
    column_count: int
    columns: list[str]
    summary: DatasetSummary
    message: str


class ExplainResponse(BaseModel):
    """Chart explanation produced by the LLM."""

    session_id: str
    chart: str
    prompt: str
    explanation: str
    available: bool
    processing_time_ms: float


class ErrorResponse(BaseModel):
    """Error response."""

    error: str
    detail: Optional[str] = None
    code: Optional[str] = None
