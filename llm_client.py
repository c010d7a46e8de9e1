# llm_client.py
"""Utilities for interacting with chat-completion LLM providers."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Optional, Protocol, Sequence, cast

import requests  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChatMessage:
    role: str
    content: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


class CompletionClient(Protocol):
    def complete(
        self, messages: Sequence[ChatMessage], model: Optional[str] = None
    ) -> Optional[str]: ...


class ChatCompletionClient:
    """Simple HTTP client for an OpenAI-compatible chat completions API."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://api.openai.com/v1",
        timeout: int = 30,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._endpoint = f"{base_url.rstrip('/')}/chat/completions"
        self.headers: dict[str, str] = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def complete(
        self, messages: Sequence[ChatMessage], model: Optional[str] = None
    ) -> Optional[str]:
        """Send one non-streamed completion request.

        Returns the reply text, or ``None`` if the request fails.
        """
        payload = {
            "model": model or self.model,
            "messages": [message.to_dict() for message in messages],
            "stream": False,
        }
        try:
            response = requests.post(
                self._endpoint, json=payload, headers=self.headers, timeout=self.timeout
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("llm_request_failed", extra={"error": str(exc)})
            return None

        try:
            data: dict[str, Any] = response.json()
            content = cast(Optional[str], data["choices"][0]["message"]["content"])
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            logger.warning("llm_response_malformed", extra={"error": str(exc)})
            return None

        if not content:
            logger.warning("llm_empty_response", extra={"model": payload["model"]})
            return None
        return content.strip()


def ask(client: CompletionClient, prompt: str, model: Optional[str] = None) -> Optional[str]:
    """Single-turn helper: send ``prompt`` as one user message."""

    return client.complete([ChatMessage(role="user", content=prompt)], model=model)
