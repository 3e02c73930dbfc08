"""Data models shared by the reasoning loop, the execution bridge and the page executor."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, List, Literal, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "Role",
    "Message",
    "Transcript",
    "Thought",
    "Action",
    "FinalAnswer",
    "Unparseable",
    "ReasoningStep",
    "ToolRequest",
    "ToolResponse",
    "LoopState",
    "Termination",
    "ReasoningResult",
]

OBSERVATION_PREFIX = "Observation: "


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    OBSERVATION = "observation"


@dataclass(frozen=True)
class Message:
    """One transcript entry."""

    role: Role
    content: str

    def to_api(self) -> Dict[str, str]:
        """Chat-completion wire shape; observations travel as user turns."""
        if self.role is Role.OBSERVATION:
            return {"role": Role.USER.value, "content": f"{OBSERVATION_PREFIX}{self.content}"}
        return {"role": self.role.value, "content": self.content}

    def render(self) -> str:
        if self.role is Role.OBSERVATION:
            return f"{OBSERVATION_PREFIX}{self.content}"
        return self.content


class Transcript(Sequence[Message]):
    """Append-only message history that always opens with a single system message.

    Entries are never reordered, replaced or deduplicated: the whole sequence is
    replayed to the completion service on every iteration.
    """

    def __init__(self, system_prompt: str) -> None:
        self._messages: List[Message] = [Message(Role.SYSTEM, system_prompt)]

    def append(self, role: Role, content: str) -> Message:
        if role is Role.SYSTEM:
            raise ValueError("Transcript already has its system message")
        message = Message(role, content)
        self._messages.append(message)
        return message

    def __getitem__(self, index):  # type: ignore[override]
        return self._messages[index]

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self._messages)

    def to_api(self) -> List[Dict[str, str]]:
        return [m.to_api() for m in self._messages]

    def render(self, *, include_system: bool = False) -> str:
        messages = self._messages if include_system else self._messages[1:]
        return "\n\n".join(m.render() for m in messages)


# ----------------------------- Reasoning steps -------------------------


@dataclass(frozen=True)
class Thought:
    text: str


@dataclass(frozen=True)
class Action:
    tool_name: str
    argument: Optional[str] = None


@dataclass(frozen=True)
class FinalAnswer:
    text: str


@dataclass(frozen=True)
class Unparseable:
    raw_text: str


ReasoningStep = Union[Thought, Action, FinalAnswer, Unparseable]


# ----------------------------- Boundary envelopes ----------------------


class ToolRequest(BaseModel):
    """Outbound envelope: ``{"tool", "argument"?, "correlationId"}``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    correlation_id: str = Field(alias="correlationId")
    tool_name: str = Field(alias="tool")
    argument: Optional[str] = None

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ToolResponse(BaseModel):
    """Inbound envelope: ``{"correlationId", "result"}`` or ``{"correlationId", "error", "errorKind"?}``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    correlation_id: str = Field(alias="correlationId")
    result: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[Literal["tool_not_found", "execution_error"]] = Field(default=None, alias="errorKind")

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# ----------------------------- Loop lifecycle --------------------------


class LoopState(str, Enum):
    INITIALIZING = "initializing"
    AWAITING_COMPLETION = "awaiting_completion"
    PARSING = "parsing"
    AWAITING_TOOL_RESULT = "awaiting_tool_result"
    DONE = "done"


class Termination(str, Enum):
    FINAL_ANSWER = "final_answer"
    ITERATION_LIMIT_REACHED = "iteration_limit_reached"
    FATAL_ERROR = "fatal_error"


class ReasoningResult(BaseModel):
    """Summary returned by a reasoning run."""

    final_answer: str = ""
    iterations: int = 0
    tool_calls: List[Dict[str, Any]] = Field(default_factory=list)
    success: bool = False
    termination: Optional[Termination] = None
    error_message: str | None = None
    transcript: str = ""
    messages: List[Dict[str, str]] = Field(default_factory=list)
