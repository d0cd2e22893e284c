"""
Categorical Aggregator

Frequency counts per normalized label with bounded cardinality, plus the
Top-K+Other collapse used by treemap and pie charts.

Aggregation never raises: empty input yields the "No Data" sentinel and
internal faults yield the "Error" sentinel.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Any, Iterator, Optional

from config import get_settings
from core.cells import is_missing, to_text
from core.dataset import Dataset
from core.logging_config import dashboard_logger as logger


UNKNOWN_LABEL = "Unknown"
NO_DATA_LABEL = "No Data"
ERROR_LABEL = "Error"
OTHER_LABEL = "Other"

SENTINEL_LABELS = frozenset({UNKNOWN_LABEL, ERROR_LABEL, NO_DATA_LABEL})


@dataclass
class CategoryAggregate:
    """Label counts ordered by descending count, ties in first-seen order."""

    column: str
    counts: dict[str, int]
    total_count: int

    @property
    def order(self) -> list[str]:
        return list(self.counts)

    @property
    def is_sentinel(self) -> bool:
        return len(self.counts) == 1 and next(iter(self.counts)) in SENTINEL_LABELS

    def percentages(self) -> list[float]:
        if self.total_count == 0:
            return [0.0] * len(self.counts)
        return [count / self.total_count * 100 for count in self.counts.values()]

    def to_dict(self) -> dict[str, Any]:
        return {
            "column": self.column,
            "categories": self.order,
            "counts": list(self.counts.values()),
            "percentages": [round(p, 2) for p in self.percentages()],
            "total_count": self.total_count,
        }


@dataclass
class DisplayAggregate:
    """Parallel label and count lists ready for a chart."""

    categories: list[str]
    counts: list[int]
    total_count: int

    def percentages(self) -> list[float]:
        if self.total_count == 0:
            return [0.0] * len(self.counts)
        return [count / self.total_count * 100 for count in self.counts]

    def to_dict(self) -> dict[str, Any]:
        return {
            "categories": self.categories,
            "counts": self.counts,
            "percentages": [round(p, 2) for p in self.percentages()],
            "total_count": self.total_count,
        }


def normalize_label(value: Any) -> str:
    """Trimmed display text, or "Unknown" for missing and blank cells."""
    if is_missing(value):
        return UNKNOWN_LABEL
    text = to_text(value).strip()
    return text if text else UNKNOWN_LABEL


def sentinel(column: str, label: str) -> CategoryAggregate:
    count = 1 if label == ERROR_LABEL else 0
    return CategoryAggregate(column=column, counts={label: count}, total_count=count)


class CategoryAggregator:
    """Batch-oriented categorical frequency counter."""

    def __init__(self):
        self.settings = get_settings()

    def _finalize(self, column: str, counter: Counter) -> CategoryAggregate:
        if not counter:
            return sentinel(column, NO_DATA_LABEL)

        # most_common sorts stably, so equal counts keep insertion order
        retained = dict(counter.most_common(self.settings.dashboard.max_categories))
        return CategoryAggregate(
            column=column,
            counts=retained,
            total_count=sum(retained.values()),
        )

    def iter_partial_aggregates(
        self,
        dataset: Dataset,
        column: str,
        batch_size: Optional[int] = None,
    ) -> Iterator[CategoryAggregate]:
        """
        Scan rows in bounded batches, yielding a snapshot after each batch.

        Only rows that carry the column key are counted. The last snapshot
        is the final aggregate; a dataset with no matching rows yields the
        "No Data" sentinel once.
        """
        if batch_size is None:
            batch_size = self.settings.dashboard.category_batch_size

        counter: Counter = Counter()
        total_rows = dataset.row_count
        rows = dataset.rows

        for start in range(0, total_rows, batch_size):
            for row in rows[start:start + batch_size]:
                if column in row:
                    counter[normalize_label(row[column])] += 1

            processed = min(start + batch_size, total_rows)
            logger.debug(f"Aggregated '{column}': {processed} of {total_rows} rows")
            yield self._finalize(column, counter)

        if total_rows == 0:
            yield sentinel(column, NO_DATA_LABEL)

    def aggregate(
        self,
        dataset: Dataset,
        column: str,
        batch_size: Optional[int] = None,
    ) -> CategoryAggregate:
        """
        Count labels of a column across the whole dataset.

        Labels beyond the configured cap are dropped before totals are
        taken, so the long tail past that rank is excluded from
        percentages.
        """
        try:
            result = sentinel(column, NO_DATA_LABEL)
            for result in self.iter_partial_aggregates(dataset, column, batch_size):
                pass
            return result
        except Exception as e:
            logger.error(f"Category aggregation failed for '{column}': {e}")
            return sentinel(column, ERROR_LABEL)

    def collapse_top_k(
        self,
        aggregate: CategoryAggregate,
        limit: int,
    ) -> DisplayAggregate:
        """
        Reduce an aggregate to at most `limit` display entries.

        The top `limit - 1` labels are kept and the remainder is merged into
        a trailing "Other" entry, which is dropped when its sum is zero. A
        lone sentinel label or an aggregate within the limit passes through.
        """
        try:
            categories = aggregate.order
            counts = list(aggregate.counts.values())

            if not categories:
                return DisplayAggregate(categories=[NO_DATA_LABEL], counts=[0], total_count=0)

            if aggregate.is_sentinel or len(categories) <= limit:
                return DisplayAggregate(
                    categories=categories,
                    counts=counts,
                    total_count=aggregate.total_count,
                )

            ranked = sorted(zip(categories, counts), key=lambda item: item[1], reverse=True)
            keep = max(limit - 1, 0)
            top, rest = ranked[:keep], ranked[keep:]
            other_sum = sum(count for _, count in rest)

            result_categories = [label for label, _ in top]
            result_counts = [count for _, count in top]
            if other_sum > 0:
                result_categories.append(OTHER_LABEL)
                result_counts.append(other_sum)

            return DisplayAggregate(
                categories=result_categories,
                counts=result_counts,
                total_count=aggregate.total_count,
            )
        except Exception as e:
            logger.error(f"Top-{limit} collapse failed for '{aggregate.column}': {e}")
            return DisplayAggregate(categories=[ERROR_LABEL], counts=[1], total_count=1)


# Global instance
category_aggregator = CategoryAggregator()
