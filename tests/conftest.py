import asyncio
from typing import Dict, Iterable, List, Sequence

import pytest

from browser_agent.bridge.channel import BoundaryChannel, RemoteExecutor
from browser_agent.llm.base_llm import BaseLLM
from browser_agent.llm.exceptions import TransportError
from browser_agent.models import ToolRequest, ToolResponse


class ScriptedLLM(BaseLLM):
    """Replays canned assistant replies; an exception in the script is raised instead."""

    def __init__(self, replies: Iterable[object] = ()):
        # no super().__init__: scripted doubles need no model
        self.model = "scripted"
        self.temperature = None
        self.replies = list(replies)
        self.calls: List[List[Dict[str, str]]] = []

    async def completion(self, messages: Sequence[Dict[str, str]], **kwargs) -> str:  # type: ignore[override]
        self.calls.append([dict(m) for m in messages])
        if not self.replies:
            raise TransportError("script exhausted")
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return str(reply)


class FakeRenderer(RemoteExecutor):
    """Renderer double: canned results, canned errors, or silence."""

    def __init__(
        self,
        results: Dict[str, str] | None = None,
        *,
        errors: Dict[str, str] | None = None,
        silent: Iterable[str] = (),
    ):
        self.results = results or {}
        self.errors = errors or {}
        self.silent = set(silent)
        self.requests: List[ToolRequest] = []

    async def handle(self, request: ToolRequest) -> ToolResponse:
        self.requests.append(request)
        if request.tool_name in self.silent:
            await asyncio.Event().wait()
        if request.tool_name in self.errors:
            return ToolResponse(correlation_id=request.correlation_id, error=self.errors[request.tool_name], error_kind="execution_error")
        if request.tool_name not in self.results:
            return ToolResponse(correlation_id=request.correlation_id, error=f"Error: Unknown tool '{request.tool_name}'", error_kind="tool_not_found")
        return ToolResponse(correlation_id=request.correlation_id, result=self.results[request.tool_name])


class RecordingChannel(BoundaryChannel):
    """Channel that only records requests; tests push responses with ``respond``."""

    def __init__(self) -> None:
        super().__init__()
        self.requests: List[ToolRequest] = []

    async def emit(self, request: ToolRequest) -> None:
        self.requests.append(request)

    def respond(self, payload) -> None:
        self._publish(payload)


async def wait_for_requests(holder, count: int = 1) -> None:
    """Yield to the loop until ``holder.requests`` has ``count`` entries."""
    for _ in range(200):
        if len(holder.requests) >= count:
            return
        await asyncio.sleep(0)
    raise AssertionError(f"expected {count} request(s), saw {len(holder.requests)}")


@pytest.fixture
def recording_channel() -> RecordingChannel:
    return RecordingChannel()
