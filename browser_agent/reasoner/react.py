from __future__ import annotations

from textwrap import dedent
from typing import Any, Dict, List, Optional

from browser_agent.bridge.execution_bridge import ExecutionBridge
from browser_agent.llm.base_llm import BaseLLM
from browser_agent.llm.exceptions import TransportError
from browser_agent.models import (
    Action,
    FinalAnswer,
    LoopState,
    ReasoningResult,
    Role,
    Termination,
    Thought,
    Transcript,
)
from browser_agent.reasoner.parser import parse
from browser_agent.tools.exceptions import ToolError, ToolExecutionError, ToolNotFoundError
from browser_agent.tools.registry import Capability, ToolRegistry

from utils.logger import get_logger
from utils.observability import observe

logger = get_logger(__name__)


# ----------------------------- Prompts ---------------------------------

_SYSTEM_PROMPT = dedent(
    """
    You are an intelligent browser assistant embedded in a browser app.
    You can reason and use tools to help users with tasks on webpages.

    CURRENT URL: {current_url}

    AVAILABLE TOOLS:
    {tools}

    RESPONSE FORMAT:
    Always use this format:
    Thought: [your reasoning]
    Action: [tool_name] OR Action: [tool_name]([argument]) for tools with args
    [Wait for observation, then continue]
    Thought: [your reasoning based on observation]
    Final Answer: [your conclusive answer to the user's query]

    Emit the markers exactly as written above. Use at most one Action per reply.
    """
).strip()


# ----------------------------- Reasoner --------------------------------


class ReACTReasoner:
    """Bounded Thought / Action / Observation loop over a chat transcript.

    Tool failures (unknown tool, renderer error, timeout) become observations the
    model can reason about. Only a failed completion call ends the run early.
    """

    DEFAULT_MAX_ITERATIONS = 4

    def __init__(
        self,
        *,
        llm: BaseLLM,
        tools: ToolRegistry,
        bridge: Optional[ExecutionBridge] = None,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ) -> None:
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        self.llm = llm
        self.tools = tools
        self.bridge = bridge
        self.max_iterations = max_iterations

    def build_transcript(self, prompt: str, current_url: str | None) -> Transcript:
        transcript = Transcript(
            _SYSTEM_PROMPT.format(current_url=current_url or "unknown", tools=self.tools.describe())
        )
        transcript.append(Role.USER, prompt)
        return transcript

    @observe
    async def run(self, prompt: str, current_url: str | None = None) -> ReasoningResult:
        logger.info("react_run_started", prompt=prompt, current_url=current_url, max_iterations=self.max_iterations)

        self._enter(LoopState.INITIALIZING)
        transcript = self.build_transcript(prompt, current_url)
        tool_calls: List[Dict[str, Any]] = []
        termination: Optional[Termination] = None
        final_answer = ""
        error_message: Optional[str] = None
        iterations = 0

        while termination is None:
            if iterations >= self.max_iterations:
                termination = Termination.ITERATION_LIMIT_REACHED
                logger.warning("max_iterations_reached", max_iterations=self.max_iterations, messages=len(transcript))
                break
            iterations += 1

            self._enter(LoopState.AWAITING_COMPLETION, iteration=iterations)
            try:
                reply = await self.llm.completion(transcript.to_api())
            except TransportError as exc:
                termination = Termination.FATAL_ERROR
                error_message = str(exc)
                logger.error("completion_transport_error", iteration=iterations, error=error_message)
                break
            except Exception as exc:
                termination = Termination.FATAL_ERROR
                error_message = f"Unexpected completion failure: {exc}"
                logger.error("completion_unexpected_error", iteration=iterations, error=str(exc), exc_info=True)
                break
            transcript.append(Role.ASSISTANT, reply)

            self._enter(LoopState.PARSING, iteration=iterations)
            step = parse(reply)

            if isinstance(step, FinalAnswer):
                termination = Termination.FINAL_ANSWER
                final_answer = step.text
                logger.info("reasoning_complete", reason="final_answer", iterations=iterations)
                break

            if isinstance(step, Action):
                observation = await self._act(step, tool_calls, iteration=iterations)
                transcript.append(Role.OBSERVATION, observation)
                continue

            if isinstance(step, Thought):
                logger.info("thought_generated", thought=step.text[:200] + ("..." if len(step.text) > 200 else ""))
            else:
                logger.warning("reply_unparseable", iteration=iterations, preview=reply[:200])

        self._enter(LoopState.DONE, termination=termination.value)

        rendered = transcript.render()
        if termination is Termination.FATAL_ERROR:
            rendered = "\n\n".join(filter(None, [rendered, f"Error: Failed to get response from AI service ({error_message})"]))

        return ReasoningResult(
            final_answer=final_answer,
            iterations=iterations,
            tool_calls=tool_calls,
            success=termination is Termination.FINAL_ANSWER,
            termination=termination,
            error_message=error_message,
            transcript=rendered,
            messages=transcript.to_api(),
        )

    async def _act(self, action: Action, tool_calls: List[Dict[str, Any]], *, iteration: int) -> str:
        try:
            capability = self.tools.resolve(action.tool_name)
        except ToolNotFoundError as exc:
            logger.warning("tool_not_found", tool=action.tool_name, iteration=iteration)
            tool_calls.append({"tool": action.tool_name, "argument": action.argument, "status": "not_found"})
            return f"Error: {exc}"

        self._enter(LoopState.AWAITING_TOOL_RESULT, iteration=iteration, tool=capability.name)
        try:
            observation = await self._execute(capability, action.argument)
        except ToolError as exc:
            logger.warning("tool_failed", tool=capability.name, error_type=type(exc).__name__, error=str(exc))
            tool_calls.append({"tool": capability.name, "argument": action.argument, "status": "error"})
            return _as_error(str(exc))
        except Exception as exc:
            logger.error("tool_unexpected_error", tool=capability.name, error=str(exc), exc_info=True)
            tool_calls.append({"tool": capability.name, "argument": action.argument, "status": "error"})
            return f"Error: Unexpected error running tool \"{capability.name}\": {exc}"

        obs_preview = observation if len(observation) <= 200 else observation[:200] + "..."
        logger.info("tool_executed", tool=capability.name, argument=action.argument, observation_preview=obs_preview)
        tool_calls.append({"tool": capability.name, "argument": action.argument, "status": "ok"})
        return observation

    async def _execute(self, capability: Capability, argument: Optional[str]) -> str:
        if capability.is_remote:
            if self.bridge is None:
                raise ToolExecutionError("No page renderer is attached", tool_name=capability.name)
            return await self.bridge.dispatch(capability.name, argument)

        if capability.handler is None:
            raise ToolExecutionError(f"Tool \"{capability.name}\" has no handler", tool_name=capability.name)
        try:
            return str(capability.handler(argument))
        except Exception as exc:
            raise ToolExecutionError(f"Error executing {capability.name}: {exc}", tool_name=capability.name) from exc

    @staticmethod
    def _enter(state: LoopState, **context: Any) -> None:
        logger.debug("loop_state", state=state.value, **context)


def _as_error(text: str) -> str:
    return text if text.startswith("Error") else f"Error: {text}"
