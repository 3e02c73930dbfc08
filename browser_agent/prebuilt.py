import os

import httpx

from browser_agent.bridge.channel import LoopbackChannel
from browser_agent.bridge.execution_bridge import ExecutionBridge
from browser_agent.executor.page_tools import PageToolExecutor, normalize_url
from browser_agent.llm.litellm import LiteLLM
from browser_agent.models import ReasoningResult
from browser_agent.page_agent import PageAgent
from browser_agent.reasoner.react import ReACTReasoner
from browser_agent.tools.browser import default_registry
from utils.config import Config
from utils.load_config import load_config

from utils.logger import get_logger
logger = get_logger(__name__)


def _validate_litellm_environment(model: str | None = None) -> None:
    """
    Validate environment variables for LiteLLM based on the model being used.

    Raises:
        ValueError: If required environment variables are missing
    """
    if not model:
        return

    provider_env_vars = {
        "gpt": ["OPENAI_API_KEY"],
        "claude": ["ANTHROPIC_API_KEY"],
        "gemini": ["GEMINI_API_KEY", "GOOGLE_API_KEY"],
        "mistral": ["MISTRAL_API_KEY"],
        "azure": ["AZURE_API_KEY", "AZURE_API_BASE"],
        "ollama": [],
    }

    model_lower = model.lower()
    for provider_prefix, env_vars in provider_env_vars.items():
        if provider_prefix in model_lower:
            if env_vars and not any(os.getenv(var) for var in env_vars):
                raise ValueError(
                    f"Missing required environment variables for model '{model}'. "
                    f"Please set one of: {', '.join(env_vars)}"
                )
            return

    common_vars = ["OPENAI_API_KEY", "ANTHROPIC_API_KEY", "GEMINI_API_KEY", "GOOGLE_API_KEY"]
    if not any(os.getenv(var) for var in common_vars):
        raise ValueError(
            f"No API key found for model '{model}'. "
            f"Please set one of the following environment variables: "
            f"{', '.join(common_vars)}, or other provider-specific API keys. "
            f"See https://docs.litellm.ai/docs/providers for full list of supported providers."
        )


class BrowserPageAgent(PageAgent):
    """
    A pre-configured PageAgent for the built-in browser tools.

    This agent combines:
    - LiteLLM for the completion service
    - the default browser tool registry
    - an ExecutionBridge over an in-process loopback channel
    - PageToolExecutor as the page renderer
    - the ReACT reasoner, capped by [agent].max_iterations
    """

    def __init__(
        self,
        *,
        config: Config | None = None,
        model: str | None = None,
        executor: PageToolExecutor | None = None,
    ):
        """
        Args:
            config: Loaded configuration; read from config.toml when omitted.
            model: Overrides [llm].model.
            executor: Renderer-side executor; a fresh one when omitted.

        Raises:
            ValueError: If required environment variables for the LLM provider are missing
        """
        config = config or load_config()
        model = model or config.llm.model
        _validate_litellm_environment(model)

        llm = LiteLLM(model=model, temperature=config.llm.temperature, max_tokens=config.llm.max_tokens)
        tools = default_registry()

        self.executor = executor or PageToolExecutor()
        self.channel = LoopbackChannel(self.executor)
        bridge = ExecutionBridge(self.channel, timeout=config.agent.tool_timeout, registry=tools)
        reasoner = ReACTReasoner(llm=llm, tools=tools, bridge=bridge, max_iterations=config.agent.max_iterations)

        super().__init__(llm=llm, tools=tools, reasoner=reasoner, bridge=bridge)

    async def solve(self, prompt: str, current_page_url: str | None = None) -> ReasoningResult:
        if current_page_url:
            await self._ensure_page(current_page_url)
        return await super().solve(prompt, current_page_url)

    async def aclose(self) -> None:
        await super().aclose()
        await self.channel.aclose()

    async def _ensure_page(self, url: str) -> None:
        current = self.executor.current_url
        if current and current.rstrip("/") == normalize_url(url).rstrip("/"):
            return
        try:
            await self.executor.load(url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            # page tools report the missing content
            logger.warning("page_load_failed", url=url, error=str(exc))
