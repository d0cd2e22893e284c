"""
Column Type Inference

Classifies columns as numeric, temporal or categorical from a row sample.
No schema is required; classification is best-effort and never raises.
"""

from typing import Optional, Sequence

from api.schemas.responses import ColumnKind, ColumnProfile, DatasetSummary
from config import get_settings
from core.cells import is_missing, parse_instants, to_number
from core.dataset import Dataset, Row
from core.logging_config import data_logger as logger


class TypeInferrer:
    """Sample-based column classifier."""

    def __init__(self):
        self.settings = get_settings()

    def profile_column(
        self,
        column: str,
        sample: Sequence[Row],
    ) -> ColumnProfile:
        """
        Classify one column from sampled rows.

        The temporal score is the share of sampled rows whose cell parses as
        an instant. Numeric requires every non-null sampled cell to be a
        finite number.
        """
        values = [row.get(column) for row in sample]
        present = [v for v in values if not is_missing(v)]

        if not present:
            return ColumnProfile(
                name=column,
                kind=ColumnKind.CATEGORICAL,
                confidence=0.0,
                sampled=0,
            )

        instants = parse_instants(present)
        temporal_score = sum(1 for m in instants if m is not None) / len(values)

        if temporal_score > self.settings.dashboard.temporal_threshold:
            return ColumnProfile(
                name=column,
                kind=ColumnKind.TEMPORAL,
                confidence=round(temporal_score, 4),
                sampled=len(present),
            )

        numeric_count = sum(1 for v in present if to_number(v) is not None)
        if numeric_count == len(present):
            return ColumnProfile(
                name=column,
                kind=ColumnKind.NUMERIC,
                confidence=1.0,
                sampled=len(present),
            )

        return ColumnProfile(
            name=column,
            kind=ColumnKind.CATEGORICAL,
            confidence=round(1 - numeric_count / len(present), 4),
            sampled=len(present),
        )

    def infer(self, dataset: Dataset) -> list[ColumnProfile]:
        """Profile every header of the dataset, in header order."""
        sample = dataset.head(self.settings.dashboard.sample_rows)
        profiles = []

        for column in dataset.headers:
            try:
                profiles.append(self.profile_column(column, sample))
            except Exception as e:
                logger.warning(f"Inference failed for column '{column}': {e}")
                profiles.append(ColumnProfile(
                    name=column,
                    kind=ColumnKind.CATEGORICAL,
                    confidence=0.0,
                    sampled=0,
                ))

        return profiles

    def detect_time_column(
        self,
        profiles: Sequence[ColumnProfile],
    ) -> Optional[str]:
        """
        Pick the highest-confidence temporal column.

        Ties go to the column that comes first in header order.
        """
        best: Optional[ColumnProfile] = None
        for profile in profiles:
            if profile.kind != ColumnKind.TEMPORAL:
                continue
            if best is None or profile.confidence > best.confidence:
                best = profile
        return best.name if best else None

    def summarize(self, dataset: Dataset) -> DatasetSummary:
        """Profile a dataset and group its columns by kind."""
        profiles = self.infer(dataset)
        summary = DatasetSummary(
            row_count=dataset.row_count,
            column_count=dataset.column_count,
            profiles=profiles,
            numeric_columns=[p.name for p in profiles if p.kind == ColumnKind.NUMERIC],
            categorical_columns=[p.name for p in profiles if p.kind == ColumnKind.CATEGORICAL],
            temporal_columns=[p.name for p in profiles if p.kind == ColumnKind.TEMPORAL],
            temporal_column=self.detect_time_column(profiles),
        )

        logger.debug(
            f"Profiled {summary.column_count} columns: "
            f"{len(summary.numeric_columns)} numeric, "
            f"{len(summary.categorical_columns)} categorical, "
            f"temporal={summary.temporal_column}"
        )
        return summary


# Global inferrer instance
type_inferrer = TypeInferrer()
