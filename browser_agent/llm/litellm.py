from browser_agent.llm.base_llm import BaseLLM
from browser_agent.llm.exceptions import TransportError
from typing import Any, Dict, Sequence
import litellm

from utils.logger import get_logger
from utils.observability import observe
logger = get_logger(__name__)


class LiteLLM(BaseLLM):
    """Wrapper around litellm.acompletion."""

    def __init__(
        self,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> None:
        super().__init__(model=model, temperature=temperature)
        self.max_tokens = max_tokens

    @observe(llm=True)
    async def completion(self, messages: Sequence[Dict[str, str]], **kwargs) -> str:
        effective_temperature = kwargs.get("temperature", self.temperature)
        effective_max_tokens = kwargs.get("max_tokens", self.max_tokens)

        completion_kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": self._copy_messages(messages),
        }
        if effective_temperature is not None:
            completion_kwargs["temperature"] = effective_temperature
        if effective_max_tokens is not None:
            completion_kwargs["max_tokens"] = effective_max_tokens

        for key, value in kwargs.items():
            if key not in ["temperature", "max_tokens"]:
                completion_kwargs[key] = value

        try:
            resp = await litellm.acompletion(**completion_kwargs)
        except Exception as exc:
            # litellm raises its own exception types for every provider failure
            logger.error("completion_failed", model=self.model, status=getattr(exc, "status_code", None), error=str(exc))
            raise TransportError(f"Completion request failed: {exc}", cause=exc) from exc

        text = self._extract_text(resp)
        if not text:
            logger.error("completion_empty", model=self.model)
            raise TransportError("Completion response carried no choice content")

        logger.debug("completion_received", model=self.model, chars=len(text))
        return text

    @staticmethod
    def _extract_text(resp: Any) -> str:
        try:
            content = resp.choices[0].message.content
        except (IndexError, AttributeError, TypeError):
            return ""
        return content.strip() if isinstance(content, str) else ""
