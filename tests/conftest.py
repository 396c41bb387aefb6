"""Shared fixtures and in-memory collaborators for the test suite."""

import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pytest

# Must be set before anything calls load_app_config().
_CONFIG_DIR = Path(tempfile.mkdtemp(prefix="validator-tests-"))
(_CONFIG_DIR / "app.yaml").write_text(
    "\n".join(
        [
            "log_level: DEBUG",
            "store:",
            f"  path: {(_CONFIG_DIR / 'questions.db').as_posix()}",
            "evaluation:",
            "  sample_size: 50",
            "  categories: [computer_security, prehistory, sociology]",
            "models:",
            "  oracle:",
            "    provider: static",
            "    answer: A",
        ]
    ),
    encoding="utf-8",
)
os.environ["VALIDATOR_CONFIG"] = str(_CONFIG_DIR / "app.yaml")

from core.llm import LLMMessage, LLMResponse  # noqa: E402
from core.types import QuestionRecord  # noqa: E402


def make_record(
    record_id: Optional[int] = None,
    category: str = "computer_security",
    expected: str = "A",
    observed: str = "",
    latency: Optional[int] = None,
) -> QuestionRecord:
    return QuestionRecord(
        id=record_id,
        question=f"Question {record_id}?",
        option_a="first",
        option_b="second",
        option_c="third",
        option_d="fourth",
        category=category,
        expected_answer=expected,
        observed_answer=observed,
        response_latency_ms=latency,
    )


class InMemoryStore:
    """Dict-backed RecordStore with switchable failures."""

    def __init__(self, records: Iterable[QuestionRecord] = ()):
        self.records: Dict[int, QuestionRecord] = {}
        self.fail_fetch: set = set()
        self.fail_save: set = set()
        self.saved: List[int] = []
        for record in records:
            self.add(record)

    def add(self, record: QuestionRecord) -> QuestionRecord:
        if record.id is None:
            record.id = len(self.records) + 1
        self.records[record.id] = record.model_copy()
        return record

    def find_by_category(self, category: str, limit: int) -> List[QuestionRecord]:
        return self.find_all_by_category(category)[:limit]

    def find_all_by_category(self, category: str) -> List[QuestionRecord]:
        if category in self.fail_fetch:
            raise RuntimeError(f"store unavailable for {category}")
        return [
            record.model_copy()
            for record in sorted(self.records.values(), key=lambda r: r.id)
            if record.category == category
        ]

    def save_result(self, record: QuestionRecord) -> None:
        if record.id in self.fail_save:
            raise RuntimeError(f"write rejected for {record.id}")
        stored = self.records[record.id]
        stored.observed_answer = record.observed_answer
        stored.response_latency_ms = record.response_latency_ms
        self.saved.append(record.id)

    def reset_all(self) -> int:
        for record in self.records.values():
            record.observed_answer = ""
            record.response_latency_ms = None
        return len(self.records)


class ScriptedClient:
    """LLM client replaying canned outputs; exceptions in the script are raised."""

    def __init__(self, outputs: Iterable[Any], model: str = "scripted"):
        self.outputs = list(outputs)
        self.model = model
        self.prompts: List[str] = []

    async def generate(self, messages: Iterable[LLMMessage], **_: Any) -> LLMResponse:
        self.prompts.append("\n".join(m.content for m in messages))
        output = self.outputs.pop(0) if self.outputs else "A"
        if isinstance(output, BaseException):
            raise output
        return LLMResponse(content=output, usage={})


class RecordingChannel:
    def __init__(self) -> None:
        self.messages: List[Dict[str, Any]] = []

    async def broadcast(self, message: Dict[str, Any]) -> None:
        self.messages.append(message)

    async def send_to(self, client_id: str, message: Dict[str, Any]) -> None:
        self.messages.append({"to": client_id, **message})


@pytest.fixture
def channel() -> RecordingChannel:
    return RecordingChannel()
