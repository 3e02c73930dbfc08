"""Lightweight LLM wrapper interface used by the reasoning loop."""
from __future__ import annotations

import os
from abc import ABC, abstractmethod
from typing import Dict, List, Sequence

from utils.logger import get_logger
logger = get_logger(__name__)


class BaseLLM(ABC):
    """Minimal asynchronous chat-LLM interface.

    • Accepts a list[dict] *messages* like the OpenAI Chat format.
    • Returns *content* (str) of the assistant reply, or raises ``TransportError``.
    • Implementations MUST NOT mutate the messages they are given and MUST NOT retry.
    """

    def __init__(self, model: str | None = None, temperature: float | None = None) -> None:
        self.model = model or os.getenv("LLM_MODEL")
        if not self.model:
            raise ValueError("No model configured. Pass model= or set the LLM_MODEL environment variable.")
        self.temperature = temperature

    @abstractmethod
    async def completion(self, messages: Sequence[Dict[str, str]], **kwargs) -> str: ...

    async def prompt(self, content: str, **kwargs) -> str:
        """Convenience method for single user prompts."""
        return await self.completion([{"role": "user", "content": content}], **kwargs)

    @staticmethod
    def _copy_messages(messages: Sequence[Dict[str, str]]) -> List[Dict[str, str]]:
        return [dict(m) for m in messages]
