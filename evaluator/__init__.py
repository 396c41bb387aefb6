"""Evaluation pipeline: question store, runner, aggregation and progress fan-out."""

from .aggregator import Aggregator, aggregate
from .progress import ConnectionManager, NullChannel, ProgressChannel
from .runner import EvaluationError, EvaluationRunner
from .store import QuestionStore, RecordStore

__all__ = [
    "Aggregator",
    "aggregate",
    "ConnectionManager",
    "NullChannel",
    "ProgressChannel",
    "EvaluationError",
    "EvaluationRunner",
    "QuestionStore",
    "RecordStore",
]
