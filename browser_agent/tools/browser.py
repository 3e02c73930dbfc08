"""Default catalogue of page-manipulation tools.

Every entry executes inside the page renderer; the bodies live in
``browser_agent.executor.page_tools``.
"""
from __future__ import annotations

from browser_agent.tools.registry import Capability, ExecutionKind, ToolRegistry

BROWSER_TOOLS = (
    Capability("extract_prices", "Extract all prices from the current page"),
    Capability("search_dom", "Find text matching a pattern and return context", argument="keyword"),
    Capability("click_button", "Click the first visible button on the page (or the first match for a CSS selector)", argument="selector"),
    Capability("scrape_table", "Extract and return table data"),
    Capability("navigate_to", "Load a different URL in the page view", argument="url"),
)


def default_registry() -> ToolRegistry:
    return ToolRegistry(BROWSER_TOOLS)


def stub_registry() -> ToolRegistry:
    """Registry whose tools only acknowledge the request.

    Useful for exercising the loop without a page renderer attached.
    """
    def _stub(capability: Capability) -> Capability:
        def _reply(argument: str | None) -> str:
            if argument:
                return f'{capability.name} for "{argument}" requested - waiting for page execution'
            return f"{capability.name} requested - waiting for page execution"

        return Capability(
            capability.name,
            capability.description,
            kind=ExecutionKind.STUB,
            argument=capability.argument,
            handler=_reply,
        )

    return ToolRegistry(_stub(c) for c in BROWSER_TOOLS)
