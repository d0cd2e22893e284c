"""
Context Builder

Builds the dataset context and chart prompt for an explanation request,
with a character budget on the context.
"""

import json
from typing import Any, Optional

from api.schemas.responses import DatasetSummary
from core.dataset import Dataset
from llm.prompts import CHART_PROMPTS, DATASET_CONTEXT


class ContextBuilder:
    """
    Builds context strings for LLM prompts.

    Manages a character budget so large charts do not blow the prompt.
    """

    MAX_CONTEXT_CHARS = 8000  # Approximately 2000 tokens

    def __init__(self, max_chars: Optional[int] = None):
        self.max_chars = max_chars or self.MAX_CONTEXT_CHARS

    def build_chart_prompt(
        self,
        chart: str,
        column: Optional[str],
        secondary_column: Optional[str] = None,
    ) -> str:
        """Fill the explanation template of a chart kind."""
        template = CHART_PROMPTS[chart]
        return template.format(
            column=column or "the selected column",
            secondary_column=secondary_column or "the second column",
        )

    def build_data_context(
        self,
        dataset: Dataset,
        summary: DatasetSummary,
        chart_data: Optional[dict[str, Any]] = None,
    ) -> str:
        """
        Dataset size, column kinds and, when given, the chart's own data.
        """
        parts = [
            DATASET_CONTEXT.format(
                row_count=dataset.row_count,
                column_count=dataset.column_count,
            ),
            "",
            "## Columns",
        ]

        for profile in summary.profiles[:20]:
            parts.append(f"- {profile.name}: {profile.kind.value} (confidence {profile.confidence:.2f})")

        if len(summary.profiles) > 20:
            parts.append(f"  ... and {len(summary.profiles) - 20} more columns")

        if chart_data:
            parts.append("")
            parts.append("## Chart Data")
            parts.append(json.dumps(chart_data, default=str))

        context = "\n".join(parts)
        if len(context) > self.max_chars:
            context = context[: self.max_chars - 16] + "\n... (truncated)"
        return context


# Global instance
context_builder = ContextBuilder()
