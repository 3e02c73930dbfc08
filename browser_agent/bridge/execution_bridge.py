"""
Execution bridge: message-passing RPC across the renderer boundary.

A tool call becomes a ``ToolRequest`` tagged with a fresh correlation id. The
caller suspends on a pending slot (an ``asyncio.Future``) until the matching
``ToolResponse`` arrives or the timeout retires the slot. The pending table is
guarded by one lock because three independent activities touch it: dispatch
inserts, the boundary listener resolves, and timeout/cancellation retires.
"""
from __future__ import annotations

import asyncio
import itertools
import threading
from typing import Any, Dict, Mapping, Optional, Union
from uuid import uuid4

from pydantic import ValidationError

from browser_agent.bridge.channel import BoundaryChannel
from browser_agent.models import ToolRequest, ToolResponse
from browser_agent.tools.exceptions import (
    BridgeClosedError,
    ToolExecutionError,
    ToolNotFoundError,
    ToolTimeoutError,
)
from browser_agent.tools.registry import ToolRegistry

from utils.logger import get_logger

logger = get_logger(__name__)


class ExecutionBridge:
    """Sends tool invocations to the page renderer and correlates the replies.

    Guarantees:
      • correlation ids are never reused for the lifetime of the process
      • a response with no pending slot (stale, duplicate, late) is discarded
      • each request resolves at most once: result, error, timeout or cancellation
    """

    def __init__(
        self,
        channel: BoundaryChannel,
        *,
        timeout: float,
        registry: Optional[ToolRegistry] = None,
    ) -> None:
        if timeout <= 0:
            raise ValueError("Tool timeout must be positive")
        self._channel = channel
        self._timeout = timeout
        self._registry = registry

        self._token = uuid4().hex[:8]
        self._counter = itertools.count(1)
        self._pending: Dict[str, asyncio.Future[ToolResponse]] = {}
        self._lock = threading.Lock()
        self._closed = False

        channel.bind(self.deliver)

    @property
    def timeout(self) -> float:
        return self._timeout

    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    async def dispatch(self, tool_name: str, argument: Optional[str] = None, timeout: Optional[float] = None) -> str:
        """Run ``tool_name`` in the renderer and return its textual result.

        Raises:
            ToolNotFoundError: the tool is unknown here or to the renderer
            ToolExecutionError: the renderer reported a failure, or the request could not be sent
            ToolTimeoutError: nothing came back within the budget
        """
        if self._registry is not None:
            self._registry.resolve(tool_name)

        budget = self._timeout if timeout is None else timeout
        future: asyncio.Future[ToolResponse] = asyncio.get_running_loop().create_future()

        with self._lock:
            if self._closed:
                raise BridgeClosedError("Execution bridge is closed", tool_name=tool_name)
            correlation_id = f"{self._token}-{next(self._counter)}"
            self._pending[correlation_id] = future

        request = ToolRequest(correlation_id=correlation_id, tool_name=tool_name, argument=argument)
        logger.info("tool_dispatched", tool=tool_name, correlation_id=correlation_id, timeout=budget)

        try:
            async with asyncio.timeout(budget):
                try:
                    await self._channel.emit(request)
                except Exception as exc:
                    raise ToolExecutionError(f"Could not send request for tool '{tool_name}': {exc}", tool_name=tool_name) from exc
                response = await future
        except TimeoutError:
            logger.warning("tool_request_timed_out", tool=tool_name, correlation_id=correlation_id, timeout=budget)
            raise ToolTimeoutError(tool_name, correlation_id=correlation_id, timeout=budget) from None
        except asyncio.CancelledError:
            logger.info("tool_request_cancelled", tool=tool_name, correlation_id=correlation_id)
            raise
        finally:
            self._retire(correlation_id)

        return self._unwrap(tool_name, response)

    def deliver(self, response: Union[ToolResponse, Mapping[str, Any]]) -> bool:
        """Boundary listener. Safe to call from any thread.

        Returns True when the response was matched to a pending slot.
        """
        if not isinstance(response, ToolResponse):
            try:
                response = ToolResponse.model_validate(response)
            except ValidationError as exc:
                logger.warning("tool_response_malformed", error=str(exc))
                return False

        with self._lock:
            future = self._pending.pop(response.correlation_id, None)

        if future is None:
            logger.warning("tool_response_discarded", correlation_id=response.correlation_id, reason="no_pending_request")
            return False

        future.get_loop().call_soon_threadsafe(self._settle, future, response)
        return True

    def close(self) -> None:
        """Refuse new dispatches and fail everything still pending."""
        with self._lock:
            self._closed = True
            pending, self._pending = self._pending, {}
        for correlation_id, future in pending.items():
            logger.info("tool_request_abandoned", correlation_id=correlation_id)
            future.get_loop().call_soon_threadsafe(self._fail, future, BridgeClosedError("Execution bridge closed before the tool responded"))

    def _retire(self, correlation_id: str) -> None:
        with self._lock:
            self._pending.pop(correlation_id, None)

    @staticmethod
    def _settle(future: asyncio.Future, response: ToolResponse) -> None:
        if future.done():
            logger.warning("tool_response_discarded", correlation_id=response.correlation_id, reason="already_resolved")
            return
        future.set_result(response)

    @staticmethod
    def _fail(future: asyncio.Future, exc: BaseException) -> None:
        if not future.done():
            future.set_exception(exc)

    @staticmethod
    def _unwrap(tool_name: str, response: ToolResponse) -> str:
        if response.ok:
            return response.result or ""
        if response.error_kind == "tool_not_found":
            raise ToolNotFoundError(tool_name)
        raise ToolExecutionError(response.error or "Unknown error", tool_name=tool_name)
