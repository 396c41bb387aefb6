from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from core.config import DEFAULT_CATEGORIES
from core.types import AggregateResult, QuestionRecord

from .store import RecordStore

logger = logging.getLogger(__name__)


def _canonical(value: object) -> str:
    text = getattr(value, "value", value)
    return str(text or "").strip().upper()


def aggregate(records: Iterable[QuestionRecord]) -> AggregateResult:
    """Accuracy percentage and mean latency over ``records``.

    Unanswered questions count as incorrect with zero latency. An empty
    input yields zeros rather than dividing by zero.
    """

    records = list(records)
    if not records:
        return AggregateResult()
    correct = sum(
        1 for record in records if _canonical(record.observed_answer) == _canonical(record.expected_answer)
    )
    latency_total = sum(record.response_latency_ms or 0 for record in records)
    return AggregateResult(
        accuracy_percent=round(100.0 * correct / len(records), 2),
        avg_latency_ms=round(latency_total / len(records), 2),
        total=len(records),
    )


class Aggregator:
    """Computes per-category summaries from whatever is currently persisted."""

    def __init__(self, store: RecordStore, categories: Optional[Iterable[str]] = None):
        self.store = store
        self.categories: List[str] = list(DEFAULT_CATEGORIES if categories is None else categories)

    def compute_results(self, categories: Optional[Iterable[str]] = None) -> Dict[str, AggregateResult]:
        results: Dict[str, AggregateResult] = {}
        for category in self.categories if categories is None else categories:
            results[category] = aggregate(self.store.find_all_by_category(category))
        logger.debug("Computed aggregates for %s categories.", len(results))
        return results
