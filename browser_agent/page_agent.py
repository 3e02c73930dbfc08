"""
PageAgent

Lightweight façade that wires the completion client, the tool registry and the
execution bridge to the ReAct reasoner, and exposes the run entry point used by
the presentation layer. One run per query; a new query supersedes the old one.
"""
from __future__ import annotations

import asyncio
from enum import Enum
from typing import Optional, Set

from browser_agent.bridge.execution_bridge import ExecutionBridge
from browser_agent.llm.base_llm import BaseLLM
from browser_agent.models import ReasoningResult, Termination
from browser_agent.reasoner.react import ReACTReasoner
from browser_agent.tools.registry import ToolRegistry

from utils.logger import get_logger

logger = get_logger(__name__)


class AgentState(str, Enum):
    READY               = "READY"
    BUSY                = "BUSY"
    NEEDS_ATTENTION     = "NEEDS_ATTENTION"


class PageAgent:
    """Top-level class that orchestrates one reasoning run per user query."""

    def __init__(
        self,
        *,
        llm: BaseLLM,
        tools: ToolRegistry,
        reasoner: ReACTReasoner,
        bridge: Optional[ExecutionBridge] = None,
    ):
        """Initializes the agent.

        Args:
            llm: The completion client.
            tools: The read-only tool registry.
            reasoner: The reasoning loop that uses the services.
            bridge: The execution bridge to the page renderer, if remote tools are registered.
        """
        self.llm = llm
        self.tools = tools
        self.reasoner = reasoner
        self.bridge = bridge

        self._state: AgentState = AgentState.READY
        self._active: Optional[asyncio.Task[ReasoningResult]] = None
        self._superseded: Set[asyncio.Task[ReasoningResult]] = set()

    @property
    def state(self) -> AgentState:
        return self._state

    async def solve(self, prompt: str, current_page_url: str | None = None) -> ReasoningResult:
        """Run one query to completion and return the structured result."""
        await self._supersede_active()

        task = asyncio.ensure_future(self.reasoner.run(prompt, current_page_url))
        self._active = task
        self._state = AgentState.BUSY

        try:
            result = await task
        except asyncio.CancelledError:
            if task not in self._superseded:
                self._state = AgentState.READY
                raise
            self._superseded.discard(task)
            return ReasoningResult(success=False, error_message="Run superseded by a newer query")
        finally:
            if self._active is task:
                self._active = None

        self._state = AgentState.NEEDS_ATTENTION if result.termination is Termination.FATAL_ERROR else AgentState.READY
        return result

    async def run(self, prompt: str, current_page_url: str | None = None) -> str:
        """Run entry point for the presentation layer: returns the transcript text."""
        result = await self.solve(prompt, current_page_url)
        return result.transcript or f"Error: {result.error_message}"

    def run_sync(self, prompt: str, current_page_url: str | None = None) -> str:
        """Blocking variant for hosts without an event loop."""
        return asyncio.run(self.run(prompt, current_page_url))

    async def aclose(self) -> None:
        await self._supersede_active()
        if self.bridge is not None:
            self.bridge.close()

    async def _supersede_active(self) -> None:
        previous = self._active
        if previous is None or previous.done():
            return
        logger.info("run_superseded")
        self._superseded.add(previous)
        previous.cancel()
        await asyncio.wait({previous})
