"""Tests for the prebuilt browser agent."""
import os
from unittest.mock import patch

import httpx
import pytest

from browser_agent.executor.page_tools import PageToolExecutor
from browser_agent.llm.litellm import LiteLLM
from browser_agent.models import Termination
from browser_agent.prebuilt import BrowserPageAgent, _validate_litellm_environment
from utils.config import Config

from tests.conftest import ScriptedLLM

SHOP_HTML = "<html><body><p>Basic $19.99</p><p>Pro $29.99</p><p>Team $49.99</p></body></html>"


class TestLiteLLMValidation:
    """Test validation for LiteLLM-based agents."""

    def test_validate_litellm_with_openai_model_and_key(self):
        with patch.dict(os.environ, {"OPENAI_API_KEY": "test-key"}, clear=False):
            _validate_litellm_environment("gpt-4o")

    def test_validate_litellm_with_anthropic_model_and_key(self):
        with patch.dict(os.environ, {"ANTHROPIC_API_KEY": "test-key"}, clear=False):
            _validate_litellm_environment("claude-3-opus")

    def test_validate_litellm_with_openai_model_missing_key(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="OPENAI_API_KEY"):
                _validate_litellm_environment("gpt-4o")

    def test_validate_litellm_with_unknown_model_and_no_keys(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="No API key found"):
                _validate_litellm_environment("some-model")

    def test_validate_litellm_with_ollama_needs_no_key(self):
        with patch.dict(os.environ, {}, clear=True):
            _validate_litellm_environment("ollama/llama3")


def _shop_client():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, html=SHOP_HTML)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_wires_config_into_components(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    config = Config()
    config.agent.max_iterations = 6
    config.agent.tool_timeout = 2.5

    agent = BrowserPageAgent(config=config)

    assert isinstance(agent.llm, LiteLLM)
    assert agent.llm.model == "gpt-4o"
    assert agent.llm.temperature == pytest.approx(0.3)
    assert agent.reasoner.max_iterations == 6
    assert agent.bridge.timeout == 2.5
    assert set(agent.tools) == {"extract_prices", "search_dom", "click_button", "scrape_table", "navigate_to"}


def test_missing_provider_key_fails_fast(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(ValueError):
        BrowserPageAgent(config=Config())


@pytest.mark.asyncio
async def test_prices_end_to_end(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    client = _shop_client()
    agent = BrowserPageAgent(config=Config(), executor=PageToolExecutor(http_client=client))
    llm = ScriptedLLM([
        "Thought: I need to look for prices on this page.\nAction: extract_prices",
        "Final Answer: $19.99, $29.99 and $49.99",
    ])
    agent.reasoner.llm = llm

    try:
        result = await agent.solve("What prices are on this page?", "shop.test/catalog")
    finally:
        await agent.aclose()
        await client.aclose()

    assert result.termination is Termination.FINAL_ANSWER
    assert "Observation: Found 3 prices:\n$19.99, $29.99, $49.99" in result.transcript
    assert "CURRENT URL: shop.test/catalog" in llm.calls[0][0]["content"]
    assert agent.executor.current_url == "https://shop.test/catalog"


@pytest.mark.asyncio
async def test_page_load_failure_does_not_abort_run(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    agent = BrowserPageAgent(config=Config(), executor=PageToolExecutor(http_client=client))
    agent.reasoner.llm = ScriptedLLM(["Action: extract_prices", "Final Answer: page unavailable"])

    try:
        result = await agent.solve("prices?", "https://down.test/")
    finally:
        await agent.aclose()
        await client.aclose()

    assert result.success is True
    assert "Observation: No page content available" in result.transcript


@pytest.mark.asyncio
async def test_malformed_page_url_does_not_abort_run(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    client = _shop_client()
    agent = BrowserPageAgent(config=Config(), executor=PageToolExecutor(http_client=client))
    agent.reasoner.llm = ScriptedLLM(["Final Answer: ok"])

    try:
        transcript = await agent.run("hi", "about:blank")
    finally:
        await agent.aclose()
        await client.aclose()

    assert transcript == "hi\n\nFinal Answer: ok"
    assert agent.executor.current_url is None
