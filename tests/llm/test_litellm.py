# test_litellm.py

import pytest
from types import SimpleNamespace
from unittest.mock import patch, AsyncMock

from browser_agent.llm.litellm import LiteLLM
from browser_agent.llm.exceptions import TransportError


def _response(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class TestLiteLLM:
    # Tests default initialisation of LLM service with default model from environment variable
    def test_env_model_used(self, monkeypatch):
        monkeypatch.setenv("LLM_MODEL", "claude-sonnet-4")
        svc = LiteLLM()
        assert svc.model == "claude-sonnet-4"

    # Tests explicit model overrides the environment variable
    def test_model_parameter_override(self, monkeypatch):
        monkeypatch.setenv("LLM_MODEL", "claude-sonnet-4")
        svc = LiteLLM(model="gpt-4o", temperature=0.3, max_tokens=500)
        assert svc.model == "gpt-4o"
        assert svc.temperature == pytest.approx(0.3)
        assert svc.max_tokens == 500

    # Tests initialisation fails without any model
    def test_missing_model_raises(self, monkeypatch):
        monkeypatch.delenv("LLM_MODEL", raising=False)
        with pytest.raises(ValueError):
            LiteLLM()

    # Tests completion forwards model, temperature and an unmodified copy of the messages
    @pytest.mark.asyncio
    async def test_completion_passes_request(self):
        messages = [{"role": "system", "content": "sys"}, {"role": "user", "content": "hi"}]
        snapshot = [dict(m) for m in messages]
        with patch("browser_agent.llm.litellm.litellm.acompletion", new_callable=AsyncMock) as mock_call:
            mock_call.return_value = _response("  Final Answer: hello  ")
            svc = LiteLLM(model="gpt-4o", temperature=0.3)
            text = await svc.completion(messages)

        assert text == "Final Answer: hello"
        kwargs = mock_call.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["temperature"] == pytest.approx(0.3)
        assert "max_tokens" not in kwargs
        assert kwargs["messages"] == snapshot
        assert kwargs["messages"] is not messages
        assert messages == snapshot

    # Tests per-call kwargs override instance defaults
    @pytest.mark.asyncio
    async def test_completion_kwargs_override(self):
        with patch("browser_agent.llm.litellm.litellm.acompletion", new_callable=AsyncMock) as mock_call:
            mock_call.return_value = _response("ok")
            svc = LiteLLM(model="gpt-4o", temperature=0.3, max_tokens=100)
            await svc.completion([{"role": "user", "content": "hi"}], temperature=0.0, max_tokens=10, top_p=0.5)

        kwargs = mock_call.call_args.kwargs
        assert kwargs["temperature"] == 0.0
        assert kwargs["max_tokens"] == 10
        assert kwargs["top_p"] == 0.5

    # Tests provider failures surface as TransportError without retrying
    @pytest.mark.asyncio
    async def test_provider_error_becomes_transport_error(self):
        with patch("browser_agent.llm.litellm.litellm.acompletion", new_callable=AsyncMock) as mock_call:
            mock_call.side_effect = RuntimeError("500 Internal Server Error")
            svc = LiteLLM(model="gpt-4o")
            with pytest.raises(TransportError) as info:
                await svc.completion([{"role": "user", "content": "hi"}])

        assert mock_call.await_count == 1
        assert "500 Internal Server Error" in str(info.value)
        assert isinstance(info.value.cause, RuntimeError)

    # Tests responses without usable content are transport failures
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            SimpleNamespace(choices=[]),
            _response(None),
            _response("   "),
            SimpleNamespace(),
        ],
    )
    async def test_empty_response_raises(self, response):
        with patch("browser_agent.llm.litellm.litellm.acompletion", new_callable=AsyncMock) as mock_call:
            mock_call.return_value = response
            svc = LiteLLM(model="gpt-4o")
            with pytest.raises(TransportError, match="no choice content"):
                await svc.completion([{"role": "user", "content": "hi"}])

    # Tests the single-prompt convenience wrapper
    @pytest.mark.asyncio
    async def test_prompt_wraps_user_message(self):
        with patch("browser_agent.llm.litellm.litellm.acompletion", new_callable=AsyncMock) as mock_call:
            mock_call.return_value = _response("pong")
            svc = LiteLLM(model="gpt-4o")
            assert await svc.prompt("ping") == "pong"

        assert mock_call.call_args.kwargs["messages"] == [{"role": "user", "content": "ping"}]
