from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Literal, Optional

from pydantic import BaseModel, Field, model_validator


class Answer(str, Enum):
    """Closed set of values an observed answer may take."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    ERROR = "ERROR"
    EMPTY = ""


VALID_CHOICES = frozenset({Answer.A, Answer.B, Answer.C, Answer.D})


def normalize_answer(raw: Optional[str]) -> Answer:
    """Map raw model output onto an ``Answer``.

    Only a bare letter A-D (after trimming and uppercasing) is accepted;
    anything else, including ``None`` and the empty string, is ``ERROR``.
    """

    if raw is None:
        return Answer.ERROR
    token = raw.strip().upper()
    for choice in VALID_CHOICES:
        if token == choice.value:
            return choice
    return Answer.ERROR


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class QuestionRecord(BaseModel):
    """A multiple-choice question and its latest evaluation outcome."""

    id: Optional[int] = None
    question: str
    option_a: str
    option_b: str
    option_c: str
    option_d: str
    category: str
    expected_answer: Literal["A", "B", "C", "D"]
    observed_answer: Answer = Answer.EMPTY
    response_latency_ms: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _latency_tracks_answer(self) -> "QuestionRecord":
        if (self.observed_answer != Answer.EMPTY) != (self.response_latency_ms is not None):
            raise ValueError("response_latency_ms must be set exactly when observed_answer is non-empty")
        return self

    @property
    def evaluated(self) -> bool:
        return self.observed_answer != Answer.EMPTY


class AggregateResult(BaseModel):
    """Accuracy and latency summary for one category."""

    accuracy_percent: float = Field(default=0.0, ge=0.0, le=100.0)
    avg_latency_ms: float = Field(default=0.0, ge=0.0)
    total: int = 0

    def to_display(self) -> Dict[str, str]:
        return {
            "accuracy": f"{self.accuracy_percent:.2f}",
            "avgTime": f"{self.avg_latency_ms:.2f}",
        }


class ProgressEvent(BaseModel):
    """Emitted once per processed question."""

    type: Literal["progress"] = "progress"
    category: str
    index: int = Field(..., ge=1)
    total: int = Field(..., ge=0)
    time: int = Field(..., ge=0, description="Latency of the processed question in ms.")


class RunReport(BaseModel):
    """Outcome of a multi-category evaluation run."""

    completed: Dict[str, int] = Field(default_factory=dict)
    failed: Dict[str, str] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed

    def error_message(self) -> str:
        details = "; ".join(f"{category}: {reason}" for category, reason in sorted(self.failed.items()))
        return f"Evaluation failed for {len(self.failed)} categor{'y' if len(self.failed) == 1 else 'ies'}: {details}"


class RunResponse(BaseModel):
    status: str = "completed"
    processed: Dict[str, int] = Field(default_factory=dict)


class ResetResponse(BaseModel):
    status: str = "reset"
    cleared: int = 0
