"""
API Request Schemas

Pydantic models for API request validation.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class DatasetPayload(BaseModel):
    """An already-parsed dataset supplied as JSON."""

    name: str = Field(
        default="dataset",
        max_length=200,
        description="Human-friendly dataset name"
    )
    headers: list[str] = Field(
        ...,
        min_length=1,
        description="Ordered, unique column names"
    )
    rows: list[dict[str, Any]] = Field(
        default=[],
        description="Rows keyed by column name"
    )


class ExplainRequest(BaseModel):
    """Request for an LLM explanation of a chart."""

    chart: str = Field(
        ...,
        pattern="^(distribution|outlier|time_series|category|proportion|correlation)$",
        description="Chart kind to explain"
    )
    column: Optional[str] = Field(
        default=None,
        description="Primary column (defaults to the chart's default selection)"
    )
    secondary_column: Optional[str] = Field(
        default=None,
        description="Second column for correlation or time series charts"
    )
    include_context: bool = Field(
        default=True,
        description="Include dataset context in the LLM prompt"
    )
