from __future__ import annotations

import asyncio
import logging
import time
from typing import Iterable, List, Optional

from core.config import DEFAULT_CATEGORIES, DEFAULT_SAMPLE_SIZE, MAX_SAMPLE_SIZE
from core.oracle import Oracle
from core.types import ProgressEvent, QuestionRecord, RunReport

from .progress import NullChannel, ProgressChannel
from .store import RecordStore

logger = logging.getLogger(__name__)


class EvaluationError(RuntimeError):
    """Raised when a category run cannot start."""


class EvaluationRunner:
    """Drives the oracle over sampled questions and records the outcome.

    Categories run concurrently with each other; questions within a category
    are processed one at a time so that progress indices and latencies stay
    meaningful.
    """

    def __init__(
        self,
        store: RecordStore,
        oracle: Oracle,
        channel: Optional[ProgressChannel] = None,
        categories: Optional[Iterable[str]] = None,
        sample_size: int = DEFAULT_SAMPLE_SIZE,
    ):
        self.store = store
        self.oracle = oracle
        self.channel = channel or NullChannel()
        self.categories: List[str] = list(DEFAULT_CATEGORIES if categories is None else categories)
        self.sample_size = sample_size

    async def run_category(self, category: str, sample_size: Optional[int] = None) -> int:
        """Evaluate up to ``sample_size`` questions and return how many were processed."""

        limit = self.sample_size if sample_size is None else sample_size
        if limit < 0:
            raise EvaluationError(f"Sample size for {category} must not be negative, got {limit}")
        if limit > MAX_SAMPLE_SIZE:
            logger.warning("Capping sample size for %s at %s (requested %s).", category, MAX_SAMPLE_SIZE, limit)
            limit = MAX_SAMPLE_SIZE
        try:
            records = await asyncio.to_thread(self.store.find_by_category, category, limit)
        except Exception as exc:
            raise EvaluationError(f"Could not fetch questions for {category}: {exc}") from exc

        total = len(records)
        logger.info("Evaluating %s questions for %s with %s", total, category, self.oracle.model)
        for index, record in enumerate(records, start=1):
            latency_ms = await self._evaluate(record)
            await self._persist(record)
            event = ProgressEvent(category=category, index=index, total=total, time=latency_ms)
            await self._emit(event)
        logger.info("Finished %s (%s questions).", category, total)
        return total

    async def run_all(
        self,
        categories: Optional[Iterable[str]] = None,
        sample_size: Optional[int] = None,
    ) -> RunReport:
        names = list(self.categories if categories is None else categories)
        outcomes = await asyncio.gather(
            *(self.run_category(name, sample_size) for name in names),
            return_exceptions=True,
        )
        report = RunReport()
        for name, outcome in zip(names, outcomes):
            if isinstance(outcome, BaseException):
                logger.error("Evaluation of %s failed: %s", name, outcome)
                report.failed[name] = str(outcome)
            else:
                report.completed[name] = outcome
        return report

    async def _evaluate(self, record: QuestionRecord) -> int:
        started = time.perf_counter()
        answer = await self.oracle.ask(record)
        latency_ms = max(0, int(round((time.perf_counter() - started) * 1000)))
        record.observed_answer = answer
        record.response_latency_ms = latency_ms
        logger.debug(
            "Question %s (%s): expected %s, observed %r in %sms",
            record.id,
            record.category,
            record.expected_answer,
            answer.value,
            latency_ms,
        )
        return latency_ms

    async def _emit(self, event: ProgressEvent) -> None:
        try:
            await self.channel.broadcast(event.model_dump())
        except Exception:
            logger.exception(
                "Failed to publish progress %s/%s for %s; continuing.", event.index, event.total, event.category
            )

    async def _persist(self, record: QuestionRecord) -> bool:
        try:
            await asyncio.to_thread(self.store.save_result, record)
        except Exception:
            logger.exception("Failed to save result for question %s; continuing.", record.id)
            return False
        return True
