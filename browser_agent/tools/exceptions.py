"""
Tool-related exceptions shared by the registry, the execution bridge and the reasoning loop.

Everything below ``ToolError`` is recoverable: the loop folds it into an
observation so the model can re-reason around it.
"""
from __future__ import annotations


class ToolError(Exception):
    """Base class for tool failures that are reported back to the model."""

    def __init__(self, message: str, *, tool_name: str | None = None):
        self.tool_name = tool_name
        self.message = message
        super().__init__(message)


class ToolNotFoundError(ToolError):
    """No capability is registered under the requested name."""

    def __init__(self, tool_name: str):
        super().__init__(f'Tool "{tool_name}" not found', tool_name=tool_name)


class ToolExecutionError(ToolError):
    """The tool ran (locally or in the page renderer) and reported a failure."""


class ToolTimeoutError(ToolError):
    """The page renderer did not answer a tool request within the configured budget."""

    def __init__(self, tool_name: str, *, correlation_id: str, timeout: float):
        self.correlation_id = correlation_id
        self.timeout = timeout
        super().__init__(
            f'Tool "{tool_name}" did not respond within {timeout:g}s',
            tool_name=tool_name,
        )


class BridgeClosedError(ToolExecutionError):
    """The execution bridge was shut down while a request was still pending."""


class DuplicateToolError(ValueError):
    """Two capabilities were registered under the same name (configuration error)."""

    def __init__(self, tool_name: str):
        self.tool_name = tool_name
        super().__init__(f"Tool '{tool_name}' is registered more than once")
