"""Boundary channel between the reasoning loop's process and the page renderer.

Only the :class:`~browser_agent.bridge.execution_bridge.ExecutionBridge` writes
requests onto a channel or consumes the responses coming back from it.
"""
from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Callable, Mapping, Optional, Set, Union

from browser_agent.models import ToolRequest, ToolResponse

from utils.logger import get_logger

logger = get_logger(__name__)

ResponseListener = Callable[[Union[ToolResponse, Mapping[str, Any]]], Any]


class BoundaryChannel(ABC):
    """Carries ``ToolRequest`` envelopes out and ``ToolResponse`` envelopes back."""

    def __init__(self) -> None:
        self._listener: Optional[ResponseListener] = None

    def bind(self, listener: ResponseListener) -> None:
        """Attach the single consumer of inbound responses."""
        if self._listener is not None:
            raise RuntimeError("Boundary channel already has a response listener")
        self._listener = listener

    def _publish(self, response: Union[ToolResponse, Mapping[str, Any]]) -> None:
        if self._listener is None:
            logger.warning("tool_response_unrouted", reason="no_listener")
            return
        self._listener(response)

    @abstractmethod
    async def emit(self, request: ToolRequest) -> None:
        """Send a request towards the remote execution context."""

    async def aclose(self) -> None:
        """Release channel resources."""


class RemoteExecutor(ABC):
    """Renderer-side counterpart: answers every request with exactly one response."""

    @abstractmethod
    async def handle(self, request: ToolRequest) -> ToolResponse: ...


class LoopbackChannel(BoundaryChannel):
    """In-process channel that hands requests to a :class:`RemoteExecutor`.

    Each request is served in its own task, so a slow or silent executor never
    blocks the caller; the bridge's timeout decides when to stop waiting.
    """

    def __init__(self, executor: RemoteExecutor) -> None:
        super().__init__()
        self._executor = executor
        self._tasks: Set[asyncio.Task] = set()

    async def emit(self, request: ToolRequest) -> None:
        logger.debug("tool_request_emitted", **request.to_wire())
        task = asyncio.get_running_loop().create_task(self._serve(request))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _serve(self, request: ToolRequest) -> None:
        response = await self._executor.handle(request)
        self._publish(response.to_wire())

    async def aclose(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()
