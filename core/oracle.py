from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .llm import LLMClient, LLMClientFactory, LLMMessage
from .types import Answer, QuestionRecord, normalize_answer

logger = logging.getLogger(__name__)


@dataclass
class OracleConfig:
    llm_section: str = "oracle"
    max_tokens: int = 2


def build_prompt(record: QuestionRecord) -> str:
    return (
        f"{record.question}\n"
        f"A. {record.option_a}\n"
        f"B. {record.option_b}\n"
        f"C. {record.option_c}\n"
        f"D. {record.option_d}\n\n"
        "Answer with exactly one letter (A, B, C, or D) and nothing else."
    )


class Oracle:
    """Asks the configured model a multiple-choice question."""

    def __init__(
        self,
        config: Optional[OracleConfig] = None,
        llm_factory: Optional[LLMClientFactory] = None,
        client: Optional[LLMClient] = None,
    ):
        self.config = config or OracleConfig()
        if client is None:
            if llm_factory is None:
                raise ValueError("Oracle requires either an LLM client or a client factory.")
            client = llm_factory.build(self.config.llm_section)
        self._llm: LLMClient = client

    @property
    def model(self) -> str:
        return getattr(self._llm, "model", "unknown")

    async def ask(self, record: QuestionRecord) -> Answer:
        """Return the normalized answer, or ``Answer.ERROR`` on any failure."""

        messages = [LLMMessage(role="user", content=build_prompt(record))]
        try:
            response = await self._llm.generate(messages, max_tokens=self.config.max_tokens)
        except Exception as exc:
            logger.warning("Oracle call failed for question %s: %s", record.id, exc)
            return Answer.ERROR
        answer = normalize_answer(response.content)
        if answer is Answer.ERROR:
            logger.debug("Unclassifiable oracle output for question %s: %r", record.id, response.content)
        return answer
