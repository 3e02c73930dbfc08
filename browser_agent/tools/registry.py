"""Static, read-only mapping from tool name to capability descriptor."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Callable, Iterable, Iterator, List, Mapping, Optional

from browser_agent.tools.exceptions import DuplicateToolError, ToolNotFoundError

from utils.logger import get_logger

logger = get_logger(__name__)

LocalHandler = Callable[[Optional[str]], str]


class ExecutionKind(str, Enum):
    LOCAL = "local"    # pure function, runs in-process without suspending
    STUB = "stub"      # canned placeholder reply, runs in-process
    REMOTE = "remote"  # executes inside the page renderer, goes through the bridge


@dataclass(frozen=True)
class Capability:
    """Everything the loop needs to know about a tool."""

    name: str
    description: str
    kind: ExecutionKind = ExecutionKind.REMOTE
    argument: Optional[str] = None
    handler: Optional[LocalHandler] = None

    def __post_init__(self) -> None:
        if self.kind is ExecutionKind.REMOTE and self.handler is not None:
            raise ValueError(f"Remote tool '{self.name}' cannot carry a local handler")
        if self.kind is not ExecutionKind.REMOTE and self.handler is None:
            raise ValueError(f"{self.kind.value.capitalize()} tool '{self.name}' needs a handler")

    @property
    def is_remote(self) -> bool:
        return self.kind is ExecutionKind.REMOTE

    def signature(self) -> str:
        return f"{self.name}({self.argument})" if self.argument else self.name

    def get_summary(self) -> str:
        """One catalogue line for the system prompt."""
        return f"- {self.signature()}: {self.description}"


class ToolRegistry(Mapping[str, Capability]):
    """Immutable after construction, so it can be shared without locking.

    Registering two capabilities under one name raises :class:`DuplicateToolError`
    immediately rather than at call time.
    """

    def __init__(self, capabilities: Iterable[Capability]):
        table: dict[str, Capability] = {}
        for capability in capabilities:
            if capability.name in table:
                raise DuplicateToolError(capability.name)
            table[capability.name] = capability
        self._tools: Mapping[str, Capability] = MappingProxyType(table)
        logger.debug("tool_registry_built", tools=list(table))

    def resolve(self, name: str) -> Capability:
        try:
            return self._tools[name]
        except KeyError:
            raise ToolNotFoundError(name) from None

    def __getitem__(self, name: str) -> Capability:
        return self._tools[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def describe(self) -> str:
        lines: List[str] = [c.get_summary() for c in self._tools.values()]
        return "\n".join(lines)
