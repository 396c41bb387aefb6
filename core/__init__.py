"""
Core building blocks for the LLM Efficiency Validator.

This package exposes configuration, logging, the LLM client layer, the
multiple-choice oracle and the shared data types.
"""

from .types import (
    AggregateResult,
    Answer,
    ProgressEvent,
    QuestionRecord,
    ResetResponse,
    RunReport,
    RunResponse,
    normalize_answer,
)

__all__ = [
    "AggregateResult",
    "Answer",
    "ProgressEvent",
    "QuestionRecord",
    "ResetResponse",
    "RunReport",
    "RunResponse",
    "normalize_answer",
]
