from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Protocol

import httpx

logger = logging.getLogger(__name__)


@dataclass
class LLMMessage:
    role: str
    content: str


@dataclass
class LLMResponse:
    content: str
    usage: Dict[str, Any]


class LLMClient(Protocol):
    """Minimal client interface for generative models."""

    model: str

    async def generate(self, messages: Iterable[LLMMessage], **kwargs: Any) -> LLMResponse:
        ...


class OpenAIClient:
    """Wrapper over the official OpenAI client."""

    def __init__(self, model: str, api_key: Optional[str] = None, timeout: float = 30.0):
        from openai import AsyncOpenAI

        self._client = AsyncOpenAI(api_key=api_key or None)
        self.model = model
        self.timeout = timeout

    async def generate(
        self,
        messages: Iterable[LLMMessage],
        **kwargs: Any,
    ) -> LLMResponse:
        messages_payload = [{"role": m.role, "content": m.content} for m in messages]
        response = await self._client.chat.completions.create(
            model=self.model, messages=messages_payload, timeout=self.timeout, **kwargs
        )
        choice = response.choices[0]
        content = choice.message.content or ""
        usage = response.usage.model_dump() if hasattr(response.usage, "model_dump") else {}
        return LLMResponse(content=content, usage=usage)


class OpenRouterClient:
    """HTTP client for OpenAI-compatible chat completion endpoints."""

    def __init__(
        self,
        model: str,
        api_key: str,
        endpoint: str = "https://openrouter.ai/api/v1/chat/completions",
        timeout: float = 40.0,
    ):
        if not api_key:
            raise ValueError("OpenRouter API key is required.")
        self.model = model
        self.api_key = api_key
        self.endpoint = endpoint
        self.timeout = timeout

    async def generate(
        self,
        messages: Iterable[LLMMessage],
        **kwargs: Any,
    ) -> LLMResponse:
        payload = {
            "model": self.model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
        }
        payload.update(kwargs)
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "X-Title": "LLM Efficiency Validator",
        }
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(self.endpoint, json=payload, headers=headers)
            response.raise_for_status()
            data = response.json()
        choice = data["choices"][0]
        content = choice.get("message", {}).get("content") or ""
        usage = data.get("usage", {})
        return LLMResponse(content=content, usage=usage)


class StaticClient:
    """Offline client that answers every question with the same letter."""

    def __init__(self, answer: str = "A", model: str = "static"):
        self.answer = answer
        self.model = model

    async def generate(
        self,
        messages: Iterable[LLMMessage],
        **_: Any,
    ) -> LLMResponse:
        logger.debug("StaticClient answering %r because no LLM is configured.", self.answer)
        return LLMResponse(
            content=self.answer,
            usage={"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0},
        )


class LLMClientFactory:
    """Factory that builds LLM clients from configuration dictionaries."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config

    def build(self, section: str) -> LLMClient:
        section_cfg = self.config.get(section) or {}
        provider = section_cfg.get("provider", "static")
        timeout = float(section_cfg.get("timeout", 30.0))
        if provider == "openai":
            model = section_cfg.get("model")
            if not model:
                raise ValueError(f"Missing model for {section} LLM configuration.")
            return OpenAIClient(model=model, api_key=section_cfg.get("api_key"), timeout=timeout)
        if provider == "openrouter":
            model = section_cfg.get("model")
            api_key = section_cfg.get("api_key")
            endpoint = section_cfg.get("endpoint", "https://openrouter.ai/api/v1/chat/completions")
            if not model or not api_key:
                raise ValueError(f"OpenRouter configuration requires model and api_key for {section}.")
            return OpenRouterClient(model=model, api_key=api_key, endpoint=endpoint, timeout=timeout)
        if provider == "static":
            return StaticClient(answer=section_cfg.get("answer", "A"))
        raise ValueError(f"Unsupported LLM provider: {provider}")
